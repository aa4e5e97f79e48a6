"""!
@brief Primary entry point for the cap-netdeploy CLI.
@details Parses the optional flags, sets up logging, loads the configuration,
wires the registry inspector, state cookie reader and remediation actions
into :class:`~cap_netdeploy.driver.RemediationDriver`, and reports the
terminal outcome. Without arguments the fixed remediation workflow runs
unconditionally.
"""
from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Iterable, Optional

from . import classify, config as config_module, logging_ext, report, version
from .actions import RemediationActions
from .driver import RemediationDriver
from .errors import RemediationError
from .registry_tools import RegistryInspector
from .report import Outcome


def build_arg_parser() -> argparse.ArgumentParser:
    """!
    @brief Create the argument parser.
    @details Every flag is optional; scheduled tasks and login scripts call the
    tool without arguments.
    """

    parser = argparse.ArgumentParser(
        prog="cap-netdeploy",
        description="Bring the 2020 software and catalog to the network deployment.",
    )
    metadata = version.build_info()
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"{metadata['version']} ({metadata['build']})",
    )
    parser.add_argument("--config", metavar="FILE", help="JSON file overriding built-in paths and values.")
    parser.add_argument("--logdir", metavar="DIR", help="Directory for human/JSONL log output.")
    parser.add_argument(
        "--diagnose",
        action="store_true",
        help="Report the detected state without running any installer.",
    )
    parser.add_argument("--no-pause", action="store_true", help="Exit immediately after the result.")
    parser.add_argument("--quiet", action="store_true", help="Only print the final result.")
    parser.add_argument("--json", action="store_true", help="Mirror structured events to stdout.")
    return parser


def _resolve_log_directory(candidate: Optional[str]) -> pathlib.Path:
    if candidate:
        return pathlib.Path(candidate).expanduser()
    return logging_ext.default_log_directory()


def _bootstrap_logging(args: argparse.Namespace) -> tuple[logging.Logger, logging.Logger]:
    """!
    @brief Initialise human and machine loggers from the parsed flags.
    """

    return logging_ext.setup_logging(
        _resolve_log_directory(getattr(args, "logdir", None)),
        console=not getattr(args, "quiet", False),
        json_to_stdout=getattr(args, "json", False),
    )


def build_driver(remediation_config: config_module.RemediationConfig) -> RemediationDriver:
    """!
    @brief Wire the production collaborators into a driver.
    """

    inspector = RegistryInspector(remediation_config)
    return RemediationDriver(
        remediation_config,
        RemediationActions(remediation_config, inspector),
        software_inspector=lambda: classify.inspect_software(inspector, remediation_config),
        catalog_inspector=lambda: classify.inspect_catalog(remediation_config),
    )


def main(argv: Optional[Iterable[str]] = None) -> int:
    """!
    @brief Entry point invoked by the shim and the console script.
    @returns Process exit code: 0 success, 1 error, 2 manual follow-up needed.
    """

    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    human_log, machine_log = _bootstrap_logging(args)

    machine_log.info(
        "startup",
        extra=logging_ext.build_event_extra("startup", diagnose=bool(args.diagnose), config=args.config),
    )

    try:
        remediation_config = config_module.load_config(args.config)
        driver = build_driver(remediation_config)
        outcome = driver.diagnose() if args.diagnose else driver.run()
    except RemediationError as exc:
        outcome = Outcome.failure("Unable to start remediation.", exc)
    except Exception as exc:  # noqa: BLE001 - unattended console must still show the result
        human_log.exception("Unexpected failure")
        outcome = Outcome.failure("Unexpected failure.", exc)

    return report.report(outcome, pause=not args.no_pause)


if __name__ == "__main__":  # pragma: no cover - for manual execution
    sys.exit(main())
