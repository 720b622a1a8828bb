"""JSON envelope output for CLI commands.

Every command prints exactly one ``{"success", "data", "error", "meta"}``
document to stdout. Errors exit with status 1.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, NoReturn, Optional

import click

from llm_router.core.responses import ErrorCode, ErrorType, error_response, success_response


def _echo(payload: Mapping[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def emit_success(data: Optional[Mapping[str, Any]] = None) -> None:
    """Print a success envelope."""
    _echo(asdict(success_response(data)))


def emit_error(
    message: str,
    *,
    code: str = ErrorCode.INTERNAL_ERROR.value,
    error_type: str = ErrorType.INTERNAL.value,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> NoReturn:
    """Print an error envelope and exit with status 1."""
    _echo(
        asdict(
            error_response(
                message,
                error_code=code,
                error_type=error_type,
                remediation=remediation,
                details=details,
            )
        )
    )
    sys.exit(1)


def emit_response(response: Mapping[str, Any]) -> None:
    """Print a pre-built envelope, exiting 1 when it reports failure."""
    _echo(response)
    if not response.get("success", False):
        sys.exit(1)
