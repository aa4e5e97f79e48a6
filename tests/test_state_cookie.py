"""!
@brief Tests for :mod:`cap_netdeploy.state_cookie`.
@details Covers the three read outcomes (absent, parsed, malformed), default
values for fields missing from older cookie versions, and the separation of
"not found" from other I/O failures.
"""
from __future__ import annotations

import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from cap_netdeploy import state_cookie  # noqa: E402
from cap_netdeploy.errors import StateCookieReadError  # noqa: E402

FULL_COOKIE = """<?xml version="1.0" encoding="utf-8"?>
<StateCookieInfo>
  <LastSourceLocation> \\\\10.0.9.29\\2020catalogbeta </LastSourceLocation>
  <Client>
    <NetworkInfo>
      <IsNetworkDeployment>true</IsNetworkDeployment>
    </NetworkInfo>
    <UserPicks>
      <GranulePicks>
        <GranulePick PlatformType="CAP" MfgCode="DMO" SelectionState="Selected" />
        <GranulePick PlatformType="CAP" MfgCode="HAW" SelectionState="NotSelected" />
        <GranulePick MfgCode="XYZ" />
      </GranulePicks>
    </UserPicks>
  </Client>
</StateCookieInfo>
"""


def _write(tmp_path: pathlib.Path, content: str) -> pathlib.Path:
    target = tmp_path / "2020Catalogs-StateCookie.xml"
    target.write_text(content, encoding="utf-8")
    return target


def test_missing_file_is_reported_as_absent(tmp_path) -> None:
    """!
    @brief A cookie that does not exist is a normal "never installed" result.
    """

    result = state_cookie.read_state_cookie(tmp_path / "missing.xml")

    assert isinstance(result, state_cookie.CookieAbsent)
    assert result.path.endswith("missing.xml")


def test_full_cookie_is_parsed(tmp_path) -> None:
    """!
    @brief Nested element paths, repeated picks and the scalar source are read.
    """

    result = state_cookie.read_state_cookie(_write(tmp_path, FULL_COOKIE))

    assert isinstance(result, state_cookie.StateCookie)
    assert result.is_network_deployment is True
    assert result.last_source_location == r"\\10.0.9.29\2020catalogbeta"
    assert result.picks == (
        state_cookie.GranulePick("CAP", "DMO", "Selected"),
        state_cookie.GranulePick("CAP", "HAW", "NotSelected"),
        state_cookie.GranulePick("", "XYZ", ""),
    )


def test_missing_fields_default_without_failing(tmp_path) -> None:
    """!
    @brief Older cookie versions without optional fields still parse.
    """

    result = state_cookie.read_state_cookie(_write(tmp_path, "<StateCookieInfo><Client /></StateCookieInfo>"))

    assert result == state_cookie.StateCookie(
        is_network_deployment=False,
        last_source_location=None,
        picks=(),
    )


@pytest.mark.parametrize("literal,expected", [("1", True), ("True", True), (" false ", False), ("0", False), ("", False)])
def test_network_flag_literals(literal: str, expected: bool) -> None:
    """!
    @brief Recognised boolean spellings map to the flag value.
    """

    document = (
        "<StateCookieInfo><Client><NetworkInfo>"
        f"<IsNetworkDeployment>{literal}</IsNetworkDeployment>"
        "</NetworkInfo></Client></StateCookieInfo>"
    )

    assert state_cookie.parse_state_cookie(document).is_network_deployment is expected


@pytest.mark.parametrize(
    "content",
    [
        "<StateCookieInfo><Client>",
        "not xml at all",
        "<SomethingElse />",
        "<StateCookieInfo><Client><NetworkInfo><IsNetworkDeployment>yes</IsNetworkDeployment>"
        "</NetworkInfo></Client></StateCookieInfo>",
    ],
)
def test_malformed_content_is_reported(tmp_path, content: str) -> None:
    """!
    @brief Unparseable cookies are malformed, never absent.
    """

    result = state_cookie.read_state_cookie(_write(tmp_path, content))

    assert isinstance(result, state_cookie.CookieMalformed)
    assert "Cannot decode DSA state XML file" in result.detail


def test_directory_in_place_of_file_is_a_read_error(tmp_path) -> None:
    """!
    @brief I/O failures other than "not found" must not look like absence.
    """

    with pytest.raises(StateCookieReadError):
        state_cookie.read_state_cookie(tmp_path)


def test_permission_error_is_a_read_error(tmp_path, monkeypatch) -> None:
    """!
    @brief Access denied on an existing cookie aborts instead of defaulting.
    """

    target = _write(tmp_path, FULL_COOKIE)

    def denied(self):  # type: ignore[no-untyped-def]
        raise PermissionError(13, "Access is denied")

    monkeypatch.setattr(state_cookie.pathlib.Path, "read_bytes", denied)

    with pytest.raises(StateCookieReadError) as excinfo:
        state_cookie.read_state_cookie(target)
    assert "Access is denied" in str(excinfo.value)
