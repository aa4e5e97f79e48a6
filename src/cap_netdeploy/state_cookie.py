"""!
@brief Reader for the DSA catalog state cookie.
@details The DSA installer records the user's latest granule selections and
deployment source in ``2020Catalogs-StateCookie.xml``. This module parses the
file into a :class:`StateCookie` while keeping three outcomes distinct: the
file is absent, it parsed, or it exists but is malformed. Any other I/O
failure raises :class:`~cap_netdeploy.errors.StateCookieReadError`.
"""
from __future__ import annotations

import pathlib
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Tuple, Union

from .errors import StateCookieReadError

ROOT_ELEMENT = "StateCookieInfo"
NETWORK_FLAG_PATH = "Client/NetworkInfo/IsNetworkDeployment"
GRANULE_PICK_PATH = "Client/UserPicks/GranulePicks/GranulePick"
LAST_SOURCE_PATH = "LastSourceLocation"

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


@dataclass(frozen=True)
class GranulePick:
    """!
    @brief One recorded granule selection.
    """

    platform_type: str = ""
    mfg_code: str = ""
    selection_state: str = ""


@dataclass(frozen=True)
class StateCookie:
    """!
    @brief Parsed contents of the state cookie.
    @details Fields missing from a given file version keep their defaults.
    """

    is_network_deployment: bool = False
    last_source_location: str | None = None
    picks: Tuple[GranulePick, ...] = ()


@dataclass(frozen=True)
class CookieAbsent:
    """!
    @brief The state cookie does not exist; the catalog was never installed.
    """

    path: str


@dataclass(frozen=True)
class CookieMalformed:
    """!
    @brief The state cookie exists but could not be parsed.
    """

    path: str
    detail: str


CookieResult = Union[CookieAbsent, StateCookie, CookieMalformed]


class _MalformedValue(ValueError):
    pass


def _parse_bool(text: str | None) -> bool:
    token = (text or "").strip()
    if not token:
        return False
    if token in _TRUE_LITERALS:
        return True
    if token in _FALSE_LITERALS:
        return False
    raise _MalformedValue(f"invalid boolean value {token!r} in {NETWORK_FLAG_PATH}")


def parse_state_cookie(content: bytes | str) -> StateCookie:
    """!
    @brief Parse state cookie XML content.
    @raises ET.ParseError When the document is not well-formed.
    @raises ValueError When the root element or a field value is unexpected.
    """

    root = ET.fromstring(content)
    if root.tag != ROOT_ELEMENT:
        raise _MalformedValue(f"expected root element {ROOT_ELEMENT}, found {root.tag}")

    picks = tuple(
        GranulePick(
            platform_type=element.get("PlatformType", ""),
            mfg_code=element.get("MfgCode", ""),
            selection_state=element.get("SelectionState", ""),
        )
        for element in root.iterfind(GRANULE_PICK_PATH)
    )

    source_element = root.find(LAST_SOURCE_PATH)
    last_source: str | None = None
    if source_element is not None:
        last_source = (source_element.text or "").strip()

    return StateCookie(
        is_network_deployment=_parse_bool(root.findtext(NETWORK_FLAG_PATH)),
        last_source_location=last_source,
        picks=picks,
    )


def read_state_cookie(path: str | pathlib.Path) -> CookieResult:
    """!
    @brief Read and parse the state cookie at ``path``.
    @returns :class:`CookieAbsent`, :class:`StateCookie` or :class:`CookieMalformed`.
    @raises StateCookieReadError For I/O failures other than "file not found".
    """

    location = str(path)
    try:
        content = pathlib.Path(path).read_bytes()
    except FileNotFoundError:
        return CookieAbsent(path=location)
    except OSError as exc:
        raise StateCookieReadError(f"Cannot open DSA state XML file {location}: {exc}") from exc

    try:
        return parse_state_cookie(content)
    except (ET.ParseError, ValueError) as exc:
        return CookieMalformed(path=location, detail=f"Cannot decode DSA state XML file: {exc}")


__all__ = [
    "CookieAbsent",
    "CookieMalformed",
    "CookieResult",
    "GranulePick",
    "StateCookie",
    "parse_state_cookie",
    "read_state_cookie",
]
