from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from core.app_version import get_app_version
from core.artifacts import Artifact
from core.config import AppConfig, load_app_config
from core.enums import Category
from core.logging import configure_logging, get_logger
from core.privacy_service import PrivacyService

LOGGER = get_logger("app.main")

CATEGORY_CHOICES = [category.value for category in Category]


def format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def artifact_to_dict(artifact: Artifact) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": artifact.identity,
        "source": artifact.source.value,
        "category": artifact.category.value,
        "location": str(artifact.location),
        "size_bytes": artifact.size_bytes,
        "label": artifact.label,
        "selected": artifact.selected,
    }
    if artifact.row_count is not None:
        data["row_count"] = artifact.row_count
    if artifact.grant is not None:
        data["grant"] = {
            "bundle_id": artifact.grant.owner_bundle_id,
            "service": artifact.grant.service_kind,
            "service_label": artifact.grant.service_label,
            "service_category": artifact.grant.service_category,
            "granted_at": artifact.grant.granted_at.isoformat() if artifact.grant.granted_at else None,
        }
    if artifact.children:
        data["children"] = [artifact_to_dict(child) for child in artifact.children]
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="privasweep",
        description="Find and remove browser and application privacy artifacts.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"PrivaSweep {get_app_version()}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log to the console as well as the log file")
    parser.add_argument("--home", type=Path, help="Scan this home directory instead of the current user's")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="List privacy artifacts")
    scan.add_argument("--json", action="store_true", help="Print the catalog as JSON")
    scan.add_argument("--category", action="append", choices=CATEGORY_CHOICES, help="Only show these categories")

    clean = sub.add_parser("clean", help="Scan, then remove the chosen categories")
    clean.add_argument("--category", action="append", choices=CATEGORY_CHOICES, required=True)
    clean.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    clean.add_argument("--json", action="store_true", help="Print the remediation report as JSON")
    return parser


def _print_catalog(service: PrivacyService, categories: Optional[List[Category]]) -> None:
    shown = [a for a in service.catalog.roots if categories is None or a.category in categories]
    for artifact in shown:
        print(f"[{artifact.category.value:<18}] {format_size(artifact.size_bytes):>10}  {artifact.label}")
        for child in artifact.children[:5]:
            print(f"{'':33}- {child.label}")
        if len(artifact.children) > 5:
            print(f"{'':33}  ... {len(artifact.children) - 5} more")
    print(f"{len(shown)} artifacts, {format_size(sum(a.size_bytes for a in shown))}")


def run_scan(service: PrivacyService, args: argparse.Namespace) -> int:
    categories = [Category(c) for c in args.category] if args.category else None
    session = service.scan()
    if args.json:
        roots = [a for a in session.catalog.roots if categories is None or a.category in categories]
        print(json.dumps({"state": session.state.value, "artifacts": [artifact_to_dict(a) for a in roots]}, indent=2))
    else:
        _print_catalog(service, categories)
    return 0


def run_clean(service: PrivacyService, args: argparse.Namespace) -> int:
    categories = [Category(c) for c in args.category]
    service.scan()
    service.deselect_all()
    for category in categories:
        service.select_all(category)
    selected = service.catalog.selected_artifacts()
    if not selected:
        print("Nothing to clean.")
        return 0

    if not args.yes:
        _print_catalog(service, categories)
        answer = input(f"Remove {len(selected)} artifacts? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Aborted.")
            return 1

    report = service.remediate()
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(f"Cleaned {format_size(report.total_bytes_cleaned)}, {report.failed_count} failed")
        for outcome in report.outcomes.values():
            if not outcome.ok and outcome.hint:
                print(f"Hint: {outcome.hint}")
                break
    return 1 if report.failed_count else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    if getattr(sys, 'frozen', False):
        # Running in a PyInstaller bundle
        base_dir = Path(sys._MEIPASS)
    else:
        # Running from source
        base_dir = Path(__file__).resolve().parents[2]

    args = build_parser().parse_args(argv)
    config: AppConfig = load_app_config(base_dir)
    if args.home:
        config.scan.home_dir = args.home.expanduser()
    configure_logging(
        config.logs_dir,
        level=config.logging.level,
        max_bytes=config.logging.app_log_max_mb * 1024 * 1024,
        backup_count=config.logging.app_log_backup_count,
        console=args.verbose,
    )
    LOGGER.info("PrivaSweep %s starting: %s", get_app_version(), args.command)

    service = PrivacyService.from_config(config)
    if args.command == "scan":
        return run_scan(service, args)
    return run_clean(service, args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
