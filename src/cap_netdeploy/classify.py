"""!
@brief Classification of software and catalog installation state.
@details Pure functions turn the raw registry and state cookie reads into
:class:`SoftwareStatus` and :class:`CatalogStatus`. The ``inspect_*`` helpers
perform the reads and then classify. None of them mutate the host.
"""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Callable, Protocol

from . import constants
from .config import RemediationConfig
from .state_cookie import (
    CookieAbsent,
    CookieMalformed,
    CookieResult,
    StateCookie,
    read_state_cookie,
)

_LOCAL_DRIVE_PATH = re.compile(r"^[A-Za-z]:(\\|/|$)")


class CatalogState(enum.Enum):
    """!
    @brief Where the catalog data currently comes from.
    """

    MISSING = "missing"
    LOCAL_ONLY = "local-only"
    NETWORK = "network"
    INVALID = "invalid"


@dataclass(frozen=True)
class SoftwareStatus:
    installed: bool
    current: bool
    version: str | None = None


@dataclass(frozen=True)
class CatalogStatus:
    """!
    @brief Classified catalog state plus the raw ``(installed, on_network)`` pair.
    @details ``installed`` is true when the baseline granule is selected.
    ``on_network`` carries the network signal even when nothing is installed,
    so callers can branch on both independently.
    """

    state: CatalogState
    installed: bool = False
    on_network: bool = False
    detail: str | None = None


class VersionReader(Protocol):
    def read_software_version(self) -> str | None: ...


def classify_software(version: str | None, expected: str) -> SoftwareStatus:
    """!
    @brief Classify the software from its recorded ``DisplayVersion``.
    @details ``None`` means the uninstall key is absent. The comparison with
    ``expected`` is exact.
    """

    if version is None:
        return SoftwareStatus(installed=False, current=False)
    return SoftwareStatus(installed=True, current=version == expected, version=version)


def has_baseline_pick(cookie: StateCookie) -> bool:
    """!
    @brief Whether the mandatory baseline granule is recorded as selected.
    """

    return any(
        pick.platform_type == constants.BASELINE_PLATFORM_TYPE
        and pick.mfg_code == constants.BASELINE_MFG_CODE
        and pick.selection_state == constants.SELECTED_STATE
        for pick in cookie.picks
    )


def _normalise_share_path(path: str) -> str:
    return path.strip().rstrip("\\/").casefold()


def network_path_matches(candidate: str | None, expected: str) -> bool:
    """!
    @brief Case-insensitive comparison of a recorded source with the network path.
    """

    if not candidate:
        return False
    return _normalise_share_path(candidate) == _normalise_share_path(expected)


def on_mount_drive(candidate: str | None, drive: str | None) -> bool:
    """!
    @brief Whether a recorded source lives on the drive the share is mapped to.
    """

    if not candidate or not drive:
        return False
    source = candidate.strip().casefold()
    prefix = drive.strip().rstrip("\\/").casefold()
    return source == prefix or source.startswith((prefix + "\\", prefix + "/"))


def classify_catalog(cookie: CookieResult, config: RemediationConfig) -> CatalogStatus:
    """!
    @brief Classify a state cookie read result.
    @details ``flag`` policy: the recorded ``IsNetworkDeployment`` flag is the
    network signal. ``source-path`` policy: ``LastSourceLocation`` must match
    the configured share or sit on the drive it is mapped to; an empty or
    other drive-letter source counts as local and any other location is
    :attr:`CatalogState.INVALID`.
    """

    if isinstance(cookie, CookieAbsent):
        return CatalogStatus(state=CatalogState.MISSING)
    if isinstance(cookie, CookieMalformed):
        return CatalogStatus(state=CatalogState.INVALID, detail=cookie.detail)

    installed = has_baseline_pick(cookie)

    if config.network_detection == constants.NETWORK_DETECTION_SOURCE_PATH:
        source = cookie.last_source_location
        on_network = network_path_matches(source, config.catalog_network_path) or on_mount_drive(
            source, config.catalog_mount_drive
        )
        if installed and not on_network and source and not _LOCAL_DRIVE_PATH.match(source):
            return CatalogStatus(
                state=CatalogState.INVALID,
                installed=True,
                on_network=False,
                detail=f"Unrecognised catalog source location '{source}'",
            )
    else:
        on_network = cookie.is_network_deployment

    if not installed:
        state = CatalogState.MISSING
    elif on_network:
        state = CatalogState.NETWORK
    else:
        state = CatalogState.LOCAL_ONLY
    return CatalogStatus(state=state, installed=installed, on_network=on_network)


def inspect_software(reader: VersionReader, config: RemediationConfig) -> SoftwareStatus:
    """!
    @brief Read the software version from the registry and classify it.
    @raises RegistryReadError Propagated from the reader.
    """

    return classify_software(reader.read_software_version(), config.software_current_version)


def inspect_catalog(
    config: RemediationConfig,
    *,
    reader: Callable[[str], CookieResult] = read_state_cookie,
) -> CatalogStatus:
    """!
    @brief Read the state cookie and classify it.
    @raises StateCookieReadError Propagated from the reader.
    """

    return classify_catalog(reader(config.state_cookie_path), config)


__all__ = [
    "CatalogState",
    "CatalogStatus",
    "SoftwareStatus",
    "classify_catalog",
    "classify_software",
    "has_baseline_pick",
    "inspect_catalog",
    "inspect_software",
    "network_path_matches",
    "on_mount_drive",
]
