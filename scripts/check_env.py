"""Utility for verifying that the server's environment configuration is intact.

It loads the supplied ``.env`` file, instantiates ``AppSettings`` and reports
missing or malformed entries before the MCP host launches the server. Optional
booking defaults that are unset are listed as warnings, and the redirect URI
to register with the Google OAuth client is printed.

Example usage::

    python -m scripts.check_env --env-file ~/.config/dept-hour-booking/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from hour_booking.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 5

_OPTIONAL_DEFAULTS = {
    "DEPT_EMPLOYEE_ID": "employee_id",
    "DEPT_CORPORATION_ID": "corporation_id",
    "DEPT_DEFAULT_ACTIVITY_ID": "default_activity_id",
    "DEPT_DEFAULT_PROJECT_ID": "default_project_id",
    "DEPT_DEFAULT_COMPANY_ID": "default_company_id",
    "DEPT_DEFAULT_BUDGET_ID": "default_budget_id",
}


def _validate_settings(env_file: Path) -> AppSettings:
    """Ensure required settings can be loaded from the supplied env file."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _unset_defaults(settings: AppSettings) -> list[str]:
    return [
        env_name
        for env_name, attribute in _OPTIONAL_DEFAULTS.items()
        if getattr(settings.dept, attribute) is None
    ]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the hour booking server's environment configuration."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the current directory).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat unset booking defaults (employee, budget, ...) as validation errors.",
    )
    return parser


def _ensure_env_file(env_file: Path) -> None:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file

    try:
        _ensure_env_file(env_file)
        settings = _validate_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error during validation: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    unset = _unset_defaults(settings)
    if unset:
        print(f"Unset booking defaults: {', '.join(unset)}", file=sys.stderr)
        if args.strict:
            return EXIT_VALIDATION_ERROR

    print("Environment OK.")
    print(f"Register this redirect URI with Google: {settings.oauth.redirect_uri}")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
