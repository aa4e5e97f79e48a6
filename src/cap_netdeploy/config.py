"""!
@brief Immutable remediation configuration.
@details :class:`RemediationConfig` enumerates every path, registry location and
expected value the workflow depends on. The defaults come from
:mod:`cap_netdeploy.constants`; an optional JSON file can override individual
entries so the classifier and driver can run against fixtures or a relocated
share. The resulting object is frozen and passed explicitly to every
component.
"""
from __future__ import annotations

import dataclasses
import json
import pathlib
from dataclasses import dataclass
from typing import Mapping, Tuple

from . import constants
from .errors import ConfigError

__all__ = [
    "RemediationConfig",
    "default_config",
    "load_config",
    "config_from_mapping",
]


@dataclass(frozen=True)
class RemediationConfig:
    """!
    @brief Every recognised option of the remediation workflow.
    """

    state_cookie_path: str = constants.STATE_COOKIE_PATH
    registry_root: int = constants.HKLM
    software_registry_key: str = constants.SOFTWARE_REGISTRY_KEY
    software_version_value: str = constants.SOFTWARE_VERSION_VALUE
    software_current_version: str = constants.SOFTWARE_CURRENT_VERSION
    software_product_code: str = constants.SOFTWARE_PRODUCT_CODE
    software_installer: str = constants.SOFTWARE_INSTALLER
    software_uninstall_args: Tuple[str, ...] = constants.SOFTWARE_UNINSTALL_ARGS
    catalog_registry_key: str = constants.CATALOG_REGISTRY_KEY
    catalog_uninstall_value: str = constants.CATALOG_UNINSTALL_VALUE
    catalog_uninstall_command: str = constants.CATALOG_UNINSTALL_COMMAND
    catalog_uninstaller: str = constants.CATALOG_UNINSTALLER
    catalog_uninstall_args: Tuple[str, ...] = constants.CATALOG_UNINSTALL_ARGS
    catalog_network_path: str = constants.CATALOG_NETWORK_PATH
    catalog_mount_drive: str | None = constants.CATALOG_MOUNT_DRIVE
    catalog_setup_relative: str = constants.CATALOG_SETUP_RELATIVE
    network_detection: str = constants.NETWORK_DETECTION_FLAG

    def __post_init__(self) -> None:
        if self.network_detection not in constants.NETWORK_DETECTION_POLICIES:
            raise ConfigError(
                "Unknown network detection policy %r (expected one of: %s)"
                % (self.network_detection, ", ".join(constants.NETWORK_DETECTION_POLICIES))
            )

    def catalog_setup_path(self) -> str:
        """!
        @brief Location of the catalog setup executable for the configured mode.
        @details With a mount drive the setup runs from the mapped drive letter,
        otherwise straight from the UNC share.
        """

        base = self.catalog_mount_drive or self.catalog_network_path
        return base.rstrip("\\") + "\\" + self.catalog_setup_relative.lstrip("\\")

    def to_dict(self) -> dict[str, object]:
        payload = dataclasses.asdict(self)
        payload["software_uninstall_args"] = list(self.software_uninstall_args)
        payload["catalog_uninstall_args"] = list(self.catalog_uninstall_args)
        return payload


# registry_root is a process handle constant, not something a file may override.
_OVERRIDABLE = {
    field.name: field for field in dataclasses.fields(RemediationConfig) if field.name != "registry_root"
}
_OPTIONAL_STRINGS = {"catalog_mount_drive"}
_STRING_SEQUENCES = {"software_uninstall_args", "catalog_uninstall_args"}


def default_config() -> RemediationConfig:
    """!
    @brief Return the built-in configuration.
    """

    return RemediationConfig()


def config_from_mapping(
    overrides: Mapping[str, object], *, base: RemediationConfig | None = None
) -> RemediationConfig:
    """!
    @brief Apply ``overrides`` on top of ``base`` (or the defaults).
    @details Keys may use hyphens or underscores. Unknown keys and values of the
    wrong type raise :class:`ConfigError` rather than being ignored.
    @returns A new frozen :class:`RemediationConfig`.
    """

    changes: dict[str, object] = {}
    for raw_key, value in overrides.items():
        key = str(raw_key).replace("-", "_")
        if key not in _OVERRIDABLE:
            raise ConfigError(f"Unknown configuration key: {raw_key}")
        if key in _STRING_SEQUENCES:
            if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
                raise ConfigError(f"Configuration key {raw_key} must be a list of strings")
            changes[key] = tuple(value)
        elif value is None and key in _OPTIONAL_STRINGS:
            changes[key] = None
        elif isinstance(value, str):
            changes[key] = value
        else:
            raise ConfigError(f"Configuration key {raw_key} must be a string")

    return dataclasses.replace(base or default_config(), **changes)


def load_config(config_path: str | pathlib.Path | None) -> RemediationConfig:
    """!
    @brief Load a JSON override file and merge it onto the defaults.
    @param config_path Path to the JSON file, or ``None`` for the defaults.
    @raises ConfigError If the file is missing, unreadable, not a JSON object,
    or contains an invalid entry.
    """

    if not config_path:
        return default_config()

    path = pathlib.Path(config_path).expanduser()
    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in configuration file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a JSON object: {path}")
    return config_from_mapping(data)
