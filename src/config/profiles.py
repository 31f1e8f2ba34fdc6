# src/config/profiles.py — v1
"""Named configuration profiles stored in ``~/pdFetch.config``.

The file is JSON::

    {
        "app_info": {"name": ..., "version": ..., ...},
        "profiles": [
            {"name": "default", "description": "...", "settings": {...}},
            ...
        ]
    }

A ``default`` profile, when present, is always loaded. A profile selected on
the command line is layered on top of it, and explicit command-line options
win over both. Profile values are plain setting names (``output_dir``,
``sn_instance_name``...).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pdfetch.version import __version__

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "pdFetch.config"
DEFAULT_PROFILE = "default"

VALID_STORAGE_MODES = ("files", "archived_files", "single_file")
VALID_OPERATION_MODES = ("list", "list_changes", "list_files", "list_changes_files")

_CHOICES: dict[str, tuple[str, ...]] = {
    "storage_mode": VALID_STORAGE_MODES,
    "operation_mode": VALID_OPERATION_MODES,
}

APP_INFO: dict[str, str] = {
    "name": "pdFetch",
    "version": __version__,
    "description": "Exports KB articles from a ServiceNow instance as PDF files.",
}

SAMPLE_PROFILE: dict[str, Any] = {
    "name": "profile_1",
    "description": (
        "Sample profile to get you started. Replace this with something meaningful."
    ),
    "settings": {
        "sn_instance_name": "acme",
        "sn_user_name": "john.doe",
        "sn_pass": "letmein1234",
        "sn_query": "",
        "output_dir": "/path/to/my/acme/folder",
        "storage_mode": "",
        "operation_mode": "",
    },
}


def default_config_path() -> Path:
    """``pdFetch.config`` in the current user's home directory."""
    return Path.home() / CONFIG_FILE_NAME


def init_config_file(path: Path | str | None = None) -> tuple[Path, bool]:
    """Write a starter configuration file.

    An existing file is never overwritten.

    Returns:
        (path, created) where ``created`` is False if the file already existed.
    """
    target = Path(path).expanduser() if path else default_config_path()
    if target.exists():
        logger.info("Configuration file already exists at %s; left untouched", target)
        return target, False
    target.parent.mkdir(parents=True, exist_ok=True)
    content = {"app_info": APP_INFO, "profiles": [SAMPLE_PROFILE]}
    target.write_text(json.dumps(content, indent="\t"), encoding="utf-8")
    logger.info("Configuration file initialized at %s", target)
    return target, True


def load_profile(path: Path | str, name: str) -> dict[str, Any] | None:
    """Read the settings of profile ``name`` as a flat dict.

    Empty string values and unknown mode values are returned as None so that
    they never override another source. Returns None when the file or the
    profile cannot be used.
    """
    file_path = Path(path).expanduser()
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        logger.warning("Error reading configuration file. Details: %s", e)
        return None
    except (OSError, ValueError) as e:
        logger.error("Error reading configuration file %s. Details: %s", file_path, e)
        return None

    profiles = data.get("profiles") if isinstance(data, dict) else None
    if not isinstance(profiles, list):
        logger.error("Invalid configuration structure in file: %s", file_path)
        return None

    profile = next(
        (p for p in profiles if isinstance(p, dict) and p.get("name") == name), None
    )
    if profile is None:
        log = logger.debug if name == DEFAULT_PROFILE else logger.warning
        log('Profile "%s" not found in configuration file: %s', name, file_path)
        return None

    settings = profile.get("settings") or {}
    if not isinstance(settings, dict):
        logger.error('Profile "%s" has no usable settings in %s', name, file_path)
        return None

    result: dict[str, Any] = {}
    for key, value in settings.items():
        if isinstance(value, str) and not value.strip():
            logger.debug('Ignoring empty "%s" of the "%s" profile', key, name)
            result[key] = None
        elif key in _CHOICES and value not in _CHOICES[key]:
            logger.warning(
                'Ignoring unknown "%s" for the "%s" profile. Valid options: %s. Given: "%s"',
                key, name, ", ".join(_CHOICES[key]), value,
            )
            result[key] = None
        else:
            result[key] = value
    return result


def merge_sources(*sources: dict[str, Any] | None) -> dict[str, Any]:
    """Merge setting sources; later sources win, None values never override."""
    merged: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if value is not None:
                merged[key] = value
    return merged
