"""!
@brief Read-only registry helpers.
@details Wraps :mod:`winreg` so a missing key (a valid "not installed" state)
is kept apart from every other failure, which raises
:class:`~cap_netdeploy.errors.RegistryReadError`. Keys are always opened with
``KEY_READ``; nothing in this module writes to the registry.
"""
from __future__ import annotations

from .config import RemediationConfig
from .errors import RegistryReadError, RegistryUnavailableError

try:  # pragma: no cover - exercised through mocks on non-Windows platforms.
    import winreg
except ImportError:  # pragma: no cover - handled gracefully during tests.
    winreg = None  # type: ignore[assignment]


def _ensure_winreg() -> None:
    """!
    @brief Raise an informative error when ``winreg`` is unavailable.
    """

    if winreg is None:
        raise RegistryUnavailableError("Windows registry APIs are unavailable on this platform")


def read_string_value(root: int, path: str, value_name: str) -> str | None:
    """!
    @brief Read the string value ``value_name`` beneath ``root``/``path``.
    @returns The value, or ``None`` when the key itself does not exist.
    @raises RegistryReadError When the key cannot be opened for any other reason,
    or the value is missing or not a string.
    """

    _ensure_winreg()
    try:
        handle = winreg.OpenKey(root, path, 0, winreg.KEY_READ)  # type: ignore[union-attr]
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise RegistryReadError(f"Cannot open registry key {path}: {exc}") from exc

    try:
        value, value_type = winreg.QueryValueEx(handle, value_name)  # type: ignore[union-attr]
    except OSError as exc:
        raise RegistryReadError(f"Cannot read value {value_name} of {path}: {exc}") from exc
    finally:
        winreg.CloseKey(handle)  # type: ignore[union-attr]

    if value_type not in (winreg.REG_SZ, winreg.REG_EXPAND_SZ) or not isinstance(value, str):  # type: ignore[union-attr]
        raise RegistryReadError(f"Value {value_name} of {path} is not a string")
    return value


class RegistryInspector:
    """!
    @brief Reads the two registry locations the workflow depends on.
    """

    def __init__(self, config: RemediationConfig) -> None:
        self._config = config

    def read_software_version(self) -> str | None:
        """!
        @brief ``DisplayVersion`` of the installed software, ``None`` if not installed.
        """

        return read_string_value(
            self._config.registry_root,
            self._config.software_registry_key,
            self._config.software_version_value,
        )

    def read_uninstall_command(self) -> str | None:
        """!
        @brief ``UninstallString`` of the catalog package, ``None`` if not registered.
        """

        return read_string_value(
            self._config.registry_root,
            self._config.catalog_registry_key,
            self._config.catalog_uninstall_value,
        )


__all__ = [
    "RegistryInspector",
    "read_string_value",
]
