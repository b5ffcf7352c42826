from __future__ import annotations

import logging
import shutil
from typing import Callable, Mapping, Optional, Sequence

from provision.models import Environment
from provision.services.errors import (
    CredentialsMissingException,
    ToolingMissingException,
    UnknownEnvironmentException,
    UsageException,
)

logger = logging.getLogger(__name__)

Which = Callable[[str], Optional[str]]


def validate_arguments(args: Sequence[str] | None) -> str:
    """Return the single positional argument or raise :class:`UsageException`."""
    args = list(args or [])
    if len(args) != 1:
        raise UsageException(
            f"expected exactly one argument, got {len(args)}. "
            f"Usage: datawise-provision <{'|'.join(Environment.choices())}>"
        )
    return args[0]


def activate_environment(token: str) -> Environment:
    try:
        environment = Environment(token)
    except ValueError:
        raise UnknownEnvironmentException(
            f"invalid environment {token!r}. Choose one of: {', '.join(Environment.choices())}"
        ) from None
    logger.info("Activated environment: %s", environment.value)
    return environment


def require_cli(binary: str, *, which: Which | None = None) -> str:
    resolve = which or shutil.which
    path = resolve(binary)
    if not path:
        raise ToolingMissingException(f"{binary} CLI not found on PATH. Install it before provisioning.")
    logger.debug("Found %s CLI at %s", binary, path)
    return path


def require_credentials(var_name: str, environ: Mapping[str, str]) -> str:
    value = environ.get(var_name) or ""
    if not value:
        raise CredentialsMissingException(
            f"environment variable {var_name} is not set. Export a credential profile name first."
        )
    logger.debug("Using credential profile from %s", var_name)
    return value
