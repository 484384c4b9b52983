"""Command line entry point for the spreadsheet provisioner."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable, Dict, List, Optional

from provisioner import auth, provisioning, settings
from provisioner.errors import ProvisionerError
from provisioner.logging_config import configure_logging
from provisioner.operations import OperationType, ProvisionConfig, validate_config
from provisioner.version import __version__

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


def collect_interactive_config(prompt: Optional[Prompt] = None) -> Dict[str, Any]:
    """Ask for every configuration value and return the raw config mapping."""

    prompt = prompt or input

    print("Google Sheets Automation Tool")
    print("============================")

    raw: Dict[str, Any] = {
        "templateUrl": prompt("Enter the URL of the template spreadsheet: ").strip(),
        "newSpreadsheetName": prompt("Enter a name for the new spreadsheet: ").strip(),
        "folderId": prompt("Enter the folder ID where the spreadsheet should be created: ").strip(),
        "sharedDriveId": prompt("Enter the shared drive ID: ").strip(),
        "orgDomain": prompt("Enter your organization domain (e.g., example.com): ").strip(),
    }

    answer = prompt("How many sheet operations do you want to perform? ").strip()
    try:
        count = int(answer)
    except ValueError:
        print(f"Invalid number of operations: {answer!r}", file=sys.stderr)
        count = 0

    operations: List[Dict[str, str]] = []
    for position in range(1, count + 1):
        print(f"\nOperation #{position}:")
        operation = {
            "sheetName": prompt("Enter the name of the sub-sheet to modify: ").strip(),
            "dataPath": prompt("Enter the path to the CSV file with data: ").strip(),
        }
        print("Operation types:")
        print("1. Replace entire sheet")
        print("2. Replace data starting at a specific cell")
        choice = prompt("Choose operation type (1 or 2): ").strip()
        if choice == "2":
            operation["operationType"] = OperationType.REPLACE_AT_CELL.value
            operation["cellId"] = prompt("Enter the starting cell ID (e.g., A2): ").strip()
        else:
            if choice != "1":
                print("Invalid operation type. Defaulting to replace entire sheet.", file=sys.stderr)
            operation["operationType"] = OperationType.REPLACE_ENTIRE_SHEET.value
        operations.append(operation)

    raw["operations"] = operations
    return raw


def _runtime_settings(args: argparse.Namespace) -> settings.RuntimeSettings:
    return settings.RuntimeSettings(
        credential_path=args.credentials,
        auth_mode=args.auth_mode,
        client_secret_path=args.client_secret,
        token_path=args.token,
        log_level="DEBUG" if args.verbose else settings.DEFAULT_LOG_LEVEL,
        log_path=args.log_file,
    )


def _provision(config: ProvisionConfig, runtime: settings.RuntimeSettings) -> int:
    credentials = auth.load_credentials(
        runtime.auth_mode,
        credential_path=runtime.resolve(runtime.credential_path),
        client_secret_path=runtime.resolve(runtime.client_secret_path),
        token_path=runtime.resolve(runtime.token_path),
    )
    services = auth.build_services(credentials)
    logger.info("Authentication successful. Creating new spreadsheet...")

    result = provisioning.create_and_update_spreadsheet(config, services)

    for entry in result.report.skipped:
        print(f"Skipped operation #{entry.index} ({entry.operation.sheet_name}): {entry.reason}")
    print(f"Operations: {result.report.summary()}")
    print(f"New spreadsheet URL: {result.url}")
    return 0


def _run_guarded(func: Callable[[], int]) -> int:
    try:
        return func()
    except ProvisionerError as exc:
        if exc.report is not None:
            print(f"Operations: {exc.report.summary()}", file=sys.stderr)
        print(f"Error: {exc}", file=sys.stderr)
        logger.debug("Run aborted", exc_info=True)
        return 1


def _configure(runtime: settings.RuntimeSettings) -> None:
    log_path = runtime.resolve(runtime.log_path) if runtime.log_path else None
    configure_logging(runtime.level, log_path=log_path)


def command_run(args: argparse.Namespace) -> int:
    def _run() -> int:
        runtime = _runtime_settings(args)
        _configure(runtime)
        return _provision(settings.load_config(args.config), runtime)

    return _run_guarded(_run)


def command_interactive(args: argparse.Namespace) -> int:
    def _interactive() -> int:
        runtime = _runtime_settings(args)
        _configure(runtime)
        raw = collect_interactive_config()
        config = validate_config(raw)
        if args.save:
            settings.write_config_file(args.save, raw)
        print("\nStarting spreadsheet creation and data operations...")
        return _provision(config, runtime)

    return _run_guarded(_interactive)


def command_validate(args: argparse.Namespace) -> int:
    try:
        config = settings.load_config(args.config)
    except ProvisionerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Configuration OK: {len(config.operations)} operation(s)")
    for position, operation in enumerate(config.operations, start=1):
        kind = getattr(operation, "raw_type", None) or operation.operation_type.value
        target = f" at {operation.cell_id}" if getattr(operation, "cell_id", None) else ""
        print(f"  #{position} {kind} -> {operation.sheet_name}{target} from {operation.data_path}")
    return 0


def _add_auth_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--credentials", default=settings.DEFAULT_CREDENTIALS_PATH, help="Service account JSON key")
    parser.add_argument(
        "--auth-mode",
        choices=auth.AUTH_MODES,
        default=settings.DEFAULT_AUTH_MODE,
        help="Authenticate with a service account or an OAuth client",
    )
    parser.add_argument("--client-secret", default=settings.DEFAULT_CLIENT_SECRET_PATH, help="OAuth client secret file")
    parser.add_argument("--token", default=settings.DEFAULT_TOKEN_PATH, help="OAuth token cache file")
    parser.add_argument("--log-file", default=None, help="Write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Provision a spreadsheet from a template and load CSV data")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Provision using a JSON configuration file")
    run_parser.add_argument("config", help="Path to the JSON configuration")
    _add_auth_arguments(run_parser)
    run_parser.set_defaults(func=command_run)

    interactive_parser = subparsers.add_parser("interactive", help="Prompt for the configuration")
    interactive_parser.add_argument("--save", default=None, help="Save the collected configuration as JSON")
    _add_auth_arguments(interactive_parser)
    interactive_parser.set_defaults(func=command_interactive)

    validate_parser = subparsers.add_parser("validate", help="Check a configuration file without any API call")
    validate_parser.add_argument("config", help="Path to the JSON configuration")
    validate_parser.set_defaults(func=command_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
