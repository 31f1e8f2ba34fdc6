# src/config/options.py — v1
"""Command-line option table and argparse parser construction.

Each option is declared once as an OptionSpec and the parser and help text are
derived from the table. Which options are mandatory comes from
``settings.MANDATORY_FIELDS``, the same list the facade validates. Parsed values
default to None so that options not given on the command line never override
profile or environment values.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any

from pdfetch.config.profiles import APP_INFO, VALID_OPERATION_MODES, VALID_STORAGE_MODES
from pdfetch.config.settings import MANDATORY_FIELDS
from pdfetch.version import __version__


@dataclass(frozen=True)
class OptionSpec:
    """One command-line option."""

    name: str
    aliases: tuple[str, ...] = ()
    title: str = ""
    help: str = ""
    choices: tuple[str, ...] | None = None
    flag: bool = False
    short: str | None = None

    @property
    def mandatory(self) -> bool:
        return self.name in MANDATORY_FIELDS

    @property
    def flags(self) -> list[str]:
        names = [f"--{self.name}", *(f"--{a}" for a in self.aliases)]
        if self.short:
            names.insert(0, f"-{self.short}")
        return names


OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec(
        "output_dir", ("od",), "Output directory",
        "Working directory for the program. Snapshots, change reports, PDFs and "
        "packages are written here. Must be an existing folder.",
    ),
    OptionSpec(
        "sn_instance_name", ("sni",), "ServiceNow instance name",
        "Name of the instance to connect to, e.g. `acme` in `acme.service-now.com`.",
    ),
    OptionSpec(
        "sn_user_name", ("snu",), "ServiceNow user name",
        "Local account used to connect, e.g. `john.doe`.",
    ),
    OptionSpec(
        "sn_pass", ("snp",), "ServiceNow password",
        "Password for the user name used to connect.",
    ),
    OptionSpec(
        "help", ("h",), "Help",
        "Displays information about the program's options and stops.",
        flag=True,
    ),
    OptionSpec(
        "init_config", ("ic",), "Configuration file initialization",
        "Writes a sample `pdFetch.config` in the home directory (or at "
        "--config_file) and stops. An existing file is left untouched.",
        flag=True,
    ),
    OptionSpec(
        "config_profile", ("cp",), "Configuration profile selection",
        "Loads values from a named profile of the configuration file. The "
        "`default` profile is always loaded first; command-line options win.",
    ),
    OptionSpec(
        "config_file", ("cf",), "Configuration file",
        "Path of the configuration file. Defaults to ~/pdFetch.config.",
    ),
    OptionSpec(
        "sn_query", ("snq",), "ServiceNow query",
        "Encoded query appended to the `workflow_state=published` baseline, "
        "e.g. `sys_domain=acbd1234`. The baseline cannot be removed.",
    ),
    OptionSpec(
        "storage_mode", ("sm",), "Storage mode",
        "files: PDFs in the `PDFs` subfolder (default). archived_files: also zip "
        "them. single_file: also merge them into one PDF.",
        choices=VALID_STORAGE_MODES,
    ),
    OptionSpec(
        "operation_mode", ("om",), "Operation mode",
        "list: write `file_list.json` only. list_changes: also write "
        "`file_changes.json` against the previous list. list_files: list and "
        "render every article (default). list_changes_files: list changes and "
        "update only the affected PDFs.",
        choices=VALID_OPERATION_MODES,
    ),
    OptionSpec(
        "newer_only", ("nwo",), "Newer only",
        "With list_changes_files, treat `PDFs` as an inbox holding only the "
        "articles added or updated by this run.",
        flag=True,
    ),
    OptionSpec(
        "verbose", (), "Verbose",
        "Log at DEBUG level.",
        flag=True, short="v",
    ),
)

# Options that steer the invocation but are not Settings fields.
CONTROL_OPTIONS = frozenset({"help", "init_config", "config_profile", "config_file", "verbose"})


def build_parser(options: tuple[OptionSpec, ...] = OPTIONS) -> argparse.ArgumentParser:
    """Build the argparse parser from the option table."""
    parser = argparse.ArgumentParser(
        prog="pdfetch",
        description=APP_INFO["description"],
        add_help=False,
        allow_abbrev=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    for opt in options:
        help_text = f"{opt.title}. {opt.help}" + (" [mandatory]" if opt.mandatory else "")
        if opt.flag:
            parser.add_argument(
                *opt.flags, dest=opt.name, action="store_true", default=None,
                help=help_text,
            )
        else:
            parser.add_argument(
                *opt.flags, dest=opt.name, default=None, choices=opt.choices,
                metavar=opt.name.upper(), help=help_text,
            )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def parse_options(argv: list[str] | None = None) -> dict[str, Any]:
    """Parse ``argv`` and return only the options actually given.

    Raises:
        SystemExit: On unknown options or invalid choices (argparse).
    """
    namespace = build_parser().parse_args(argv)
    return {k: v for k, v in vars(namespace).items() if v is not None}


def format_help() -> str:
    """Program banner plus the generated option help."""
    banner = f"{APP_INFO['name']} {__version__}\n{APP_INFO['description']}\n"
    return f"{banner}\n{build_parser().format_help()}"
