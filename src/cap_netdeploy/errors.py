"""!
@brief Exception hierarchy shared by the remediation modules.
@details Every failure that must end a run on the hard-error path derives from
:class:`RemediationError`. "Not found" conditions are not exceptions; readers
return ``None`` or an absent marker for them instead.
"""
from __future__ import annotations

from typing import Sequence


class RemediationError(RuntimeError):
    """!
    @brief Base class for failures that abort the run with the error exit code.
    """


class ConfigError(RemediationError):
    """!
    @brief Raised when a configuration override file is unreadable or invalid.
    """


class RegistryReadError(RemediationError):
    """!
    @brief A registry key exists but could not be read, or the value is missing.
    """


class RegistryUnavailableError(RegistryReadError):
    """!
    @brief The Windows registry APIs are not available on this host.
    """


class StateCookieReadError(RemediationError):
    """!
    @brief The state cookie exists but could not be read from disk.
    """


class IntegrityMismatchError(RemediationError):
    """!
    @brief The recorded uninstall command differs from the expected command line.
    """

    def __init__(self, actual: str, expected: str) -> None:
        super().__init__(f"UninstallString had an unexpected value of {actual!r}")
        self.actual = actual
        self.expected = expected


class CommandFailedError(RemediationError):
    """!
    @brief An external command failed to launch or exited non-zero.
    @details The captured combined stdout/stderr is kept on the exception and
    included in its message so the operator sees it on the console.
    """

    def __init__(
        self,
        description: str,
        command: Sequence[str] | str,
        returncode: int,
        output: str,
        error: str | None = None,
    ) -> None:
        detail = error if error else f"exit code {returncode}"
        message = f"{description} failed ({detail})"
        if output.strip():
            message = f"{message}; command output: {output.strip()}"
        super().__init__(message)
        self.description = description
        self.command = command
        self.returncode = returncode
        self.output = output
        self.error = error


__all__ = [
    "CommandFailedError",
    "ConfigError",
    "IntegrityMismatchError",
    "RegistryReadError",
    "RegistryUnavailableError",
    "RemediationError",
    "StateCookieReadError",
]
