"""
Permission registry service codes.

Maps ``kTCCService*`` codes to a human label and a display category.
Codes not listed here fall back to a cleaned version of the raw code under
category "Other".
"""

from __future__ import annotations

import re
from typing import Dict, Tuple

PRIVACY = "Privacy"
OTHER = "Other"

SERVICE_PREFIX = "kTCCService"

SERVICES: Dict[str, Tuple[str, str]] = {
    "kTCCServiceCamera": ("Camera", PRIVACY),
    "kTCCServiceMicrophone": ("Microphone", PRIVACY),
    "kTCCServiceScreenCapture": ("Screen Recording", PRIVACY),
    "kTCCServiceAccessibility": ("Accessibility", PRIVACY),
    "kTCCServiceListenEvent": ("Input Monitoring", PRIVACY),
    "kTCCServicePostEvent": ("Keyboard Events", PRIVACY),
    "kTCCServiceSystemPolicyAllFiles": ("Full Disk Access", PRIVACY),
    "kTCCServiceSystemPolicyDesktopFolder": ("Desktop Folder", PRIVACY),
    "kTCCServiceSystemPolicyDocumentsFolder": ("Documents Folder", PRIVACY),
    "kTCCServiceSystemPolicyDownloadsFolder": ("Downloads Folder", PRIVACY),
    "kTCCServiceSystemPolicyNetworkVolumes": ("Network Volumes", PRIVACY),
    "kTCCServiceSystemPolicyRemovableVolumes": ("Removable Volumes", PRIVACY),
    "kTCCServiceAddressBook": ("Contacts", PRIVACY),
    "kTCCServiceCalendar": ("Calendars", PRIVACY),
    "kTCCServiceReminders": ("Reminders", PRIVACY),
    "kTCCServicePhotos": ("Photos", PRIVACY),
    "kTCCServicePhotosAdd": ("Add to Photos", PRIVACY),
    "kTCCServiceLocation": ("Location Services", PRIVACY),
    "kTCCServiceMediaLibrary": ("Media & Apple Music", PRIVACY),
    "kTCCServiceSpeechRecognition": ("Speech Recognition", PRIVACY),
    "kTCCServiceBluetoothAlways": ("Bluetooth", PRIVACY),
    "kTCCServiceFocusStatus": ("Focus Status", PRIVACY),
    "kTCCServiceAppleEvents": ("Automation", OTHER),
    "kTCCServiceDeveloperTool": ("Developer Tools", OTHER),
    "kTCCServiceSystemPolicyAppBundles": ("App Management", OTHER),
    "kTCCServiceSystemPolicySysAdminFiles": ("Administrator Files", OTHER),
    "kTCCServiceUbiquity": ("iCloud", OTHER),
    "kTCCServiceLiverpool": ("Location (legacy)", OTHER),
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def describe_service(code: str) -> Tuple[str, str]:
    """
    Human label and category for a service code.

    Example:
        >>> describe_service("kTCCServiceCamera")
        ('Camera', 'Privacy')
        >>> describe_service("kTCCServiceFancyNewThing")
        ('Fancy New Thing', 'Other')
    """
    if code in SERVICES:
        return SERVICES[code]
    raw = code[len(SERVICE_PREFIX):] if code.startswith(SERVICE_PREFIX) else code
    label = _CAMEL_BOUNDARY.sub(" ", raw).replace("_", " ").strip()
    return (label or code, OTHER)
