from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .logging import get_logger

LOGGER = get_logger("core.config")


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "INFO"
    app_log_max_mb: int = 50
    app_log_backup_count: int = 10


@dataclass(slots=True)
class ScanConfig:
    """Scan configuration from config.yml."""

    max_workers: int = field(default_factory=lambda: min(8, max(1, os.cpu_count() or 4)))
    top_cookie_domains: int = 100
    cookie_breakdown: bool = True
    copy_locked_stores: bool = True  # read a temp copy when a browser holds the store
    store_timeout: float = 2.0
    home_dir: Path = field(default_factory=Path.home)
    system_root: Path = Path("/")


@dataclass(slots=True)
class RemediationConfig:
    """Remediation configuration from config.yml."""

    grace_period_seconds: float = 3.0
    force_terminate: bool = True
    vacuum_after_purge: bool = True
    refresh_recent_items: bool = True
    recent_items_sample_size: int = 50
    store_timeout: float = 2.0
    protected_paths: List[Path] = field(default_factory=list)


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk."""

    base_dir: Path
    logs_dir: Path
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    remediation: RemediationConfig = field(default_factory=RemediationConfig)

    def to_json(self) -> str:
        """Serialize the configuration into a JSON string for diagnostics."""
        data = {
            "logs_dir": str(self.logs_dir),
            "logging": {"level": self.logging.level},
            "scan": {
                "max_workers": self.scan.max_workers,
                "top_cookie_domains": self.scan.top_cookie_domains,
                "home_dir": str(self.scan.home_dir),
                "system_root": str(self.scan.system_root),
            },
            "remediation": {
                "grace_period_seconds": self.remediation.grace_period_seconds,
                "force_terminate": self.remediation.force_terminate,
                "protected_paths": [str(p) for p in self.remediation.protected_paths],
            },
        }
        return json.dumps(data, indent=2, sort_keys=True)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle) or {}
        if not isinstance(content, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level.")
        return content


def _env_override(name: str, current, cast):
    raw = os.environ.get(name)
    if raw is None:
        return current
    try:
        return cast(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r", name, raw)
        return current


def load_app_config(base_dir: Path, logs_dir: Optional[Path] = None) -> AppConfig:
    """Load application configuration from disk, providing sensible defaults."""

    config_yaml = base_dir / "config" / "config.yml"
    overrides = _load_yaml(config_yaml)

    if logs_dir is None:
        logs_dir = Path.home() / "Library" / "Logs" / "PrivaSweep"

    logging_cfg = overrides.get("logging", {}) or {}
    logging_config = LoggingConfig(
        level=str(logging_cfg.get("level", "INFO")).upper(),
        app_log_max_mb=int(logging_cfg.get("app_log_max_mb", 50)),
        app_log_backup_count=int(logging_cfg.get("app_log_backup_count", 10)),
    )

    scan_cfg = overrides.get("scan", {}) or {}
    scan_config = ScanConfig()
    if "max_workers" in scan_cfg:
        scan_config.max_workers = max(1, int(scan_cfg["max_workers"]))
    scan_config.top_cookie_domains = int(scan_cfg.get("top_cookie_domains", 100))
    scan_config.cookie_breakdown = bool(scan_cfg.get("cookie_breakdown", True))
    scan_config.copy_locked_stores = bool(scan_cfg.get("copy_locked_stores", True))
    scan_config.store_timeout = float(scan_cfg.get("store_timeout", 2.0))
    if scan_cfg.get("home_dir"):
        scan_config.home_dir = Path(scan_cfg["home_dir"]).expanduser()
    if scan_cfg.get("system_root"):
        scan_config.system_root = Path(scan_cfg["system_root"])

    remediation_cfg = overrides.get("remediation", {}) or {}
    remediation_config = RemediationConfig(
        grace_period_seconds=float(remediation_cfg.get("grace_period_seconds", 3.0)),
        force_terminate=bool(remediation_cfg.get("force_terminate", True)),
        vacuum_after_purge=bool(remediation_cfg.get("vacuum_after_purge", True)),
        refresh_recent_items=bool(remediation_cfg.get("refresh_recent_items", True)),
        recent_items_sample_size=int(remediation_cfg.get("recent_items_sample_size", 50)),
        store_timeout=float(remediation_cfg.get("store_timeout", 2.0)),
        protected_paths=[Path(p).expanduser() for p in remediation_cfg.get("protected_paths", []) or []],
    )

    # Respect environment variable overrides
    scan_config.max_workers = max(1, _env_override("PRIVASWEEP_MAX_WORKERS", scan_config.max_workers, int))
    remediation_config.grace_period_seconds = _env_override(
        "PRIVASWEEP_GRACE_PERIOD", remediation_config.grace_period_seconds, float
    )
    scan_config.home_dir = _env_override("PRIVASWEEP_HOME", scan_config.home_dir, Path)

    return AppConfig(
        base_dir=base_dir,
        logs_dir=logs_dir,
        logging=logging_config,
        scan=scan_config,
        remediation=remediation_config,
    )
