# src/main.py — v1
"""CLI entry point.

Usage:
    pdfetch --output_dir=/data/acme --sni=acme --snu=john.doe --snp=secret
    pdfetch --cp=acme --om=list_changes_files --sm=archived_files
    pdfetch --init_config

Exit status: 0 normal completion, 1 early intentional stop (help, version,
init_config), 2 error, 130 interrupted.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from pdfetch.config.options import CONTROL_OPTIONS, format_help, parse_options
from pdfetch.config.profiles import (
    DEFAULT_PROFILE,
    default_config_path,
    init_config_file,
    load_profile,
    merge_sources,
)
from pdfetch.config.settings import ConfigurationError, Settings, load_settings
from pdfetch.core.models import OperationResult
from pdfetch.logging.logger import setup_logging
from pdfetch.storage.session import SessionLockedError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_EARLY = 1
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    try:
        options = parse_options(argv)
    except SystemExit as e:
        # argparse exits 0 after --version and 2 on bad options.
        return EXIT_EARLY if not e.code else EXIT_ERROR

    verbose = bool(options.get("verbose"))
    _setup_logging("DEBUG" if verbose else "INFO")

    if options.get("help"):
        print(format_help())
        return EXIT_EARLY

    config_path = Path(options.get("config_file") or default_config_path()).expanduser()
    if options.get("init_config"):
        path, created = init_config_file(config_path)
        print(f"Configuration file {'initialized' if created else 'already present'} at {path}")
        return EXIT_EARLY

    try:
        settings = _resolve_settings(options, config_path)
    except (ConfigurationError, ValidationError) as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_ERROR

    _setup_logging(
        "DEBUG" if verbose else settings.log_level,
        settings.log_format,
        settings.log_file,
        settings.log_rotation,
        settings.log_retention,
    )

    try:
        result = asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except ConfigurationError as e:
        logger.error("%s", e)
        return EXIT_ERROR
    except SessionLockedError as e:
        logger.error("%s", e)
        return EXIT_ERROR
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        return EXIT_ERROR

    _print_result_summary(result)
    return EXIT_OK if result.status == "completed" else EXIT_ERROR


def cli() -> None:
    """Console-script wrapper."""
    sys.exit(main())


def _resolve_settings(options: dict[str, object], config_path: Path) -> Settings:
    """Layer default profile, selected profile and command-line options."""
    default_profile = (
        load_profile(config_path, DEFAULT_PROFILE) if config_path.is_file() else None
    )
    profile_name = options.get("config_profile")
    selected_profile = load_profile(config_path, str(profile_name)) if profile_name else None
    given = {k: v for k, v in options.items() if k not in CONTROL_OPTIONS}
    merged = merge_sources(default_profile, selected_profile, given)
    return load_settings(**merged)


async def _run(settings: Settings) -> OperationResult:
    from pdfetch.api.facade import execute

    return await execute(settings)


def _print_result_summary(result: OperationResult) -> None:
    """Print a human-readable summary of OperationResult."""
    print(f"\n{result.operation_mode} {result.status}:")
    print(f"  Articles listed: {result.snapshot_size}")
    if result.fell_back_to_full_listing:
        print("  No previous listing: performed a full listing instead")
    if result.report is not None:
        changes = result.report.changes
        print(
            f"  Changes:         {len(changes.added)} added, "
            f"{len(changes.updated)} updated, {len(changes.removed)} removed"
        )
    if result.deleted:
        print(f"  Deleted:         {len(result.deleted)} file(s)")
    if result.render.attempted:
        print(f"  Rendered:        {len(result.render.rendered)}")
        print(f"  Failed:          {len(result.render.failed)}")
        for number, reason in result.render.failed.items():
            print(f"    {number}: {reason}")
    if result.package_path:
        print(f"  Package:         {result.package_path}")
    if result.error:
        print(f"  Error:           {result.error}")


def _setup_logging(
    level: str,
    log_format: str = "text",
    log_file: Path | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> None:
    """Configure logging for CLI usage."""
    setup_logging(level, log_format, log_file, rotation, retention)
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
