"""!
@brief Tests for :mod:`cap_netdeploy.classify`.
@details Exercises the catalog decision order under both network detection
policies and the exact-match software version comparison.
"""
from __future__ import annotations

import dataclasses
import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from cap_netdeploy import classify  # noqa: E402
from cap_netdeploy.classify import CatalogState  # noqa: E402
from cap_netdeploy.config import RemediationConfig  # noqa: E402
from cap_netdeploy.state_cookie import (  # noqa: E402
    CookieAbsent,
    CookieMalformed,
    GranulePick,
    StateCookie,
)

BASELINE = GranulePick("CAP", "DMO", "Selected")
FLAG_CONFIG = RemediationConfig()
PATH_CONFIG = RemediationConfig(network_detection="source-path")


def _cookie(*picks: GranulePick, flag: bool = False, source: str | None = None) -> StateCookie:
    return StateCookie(is_network_deployment=flag, last_source_location=source, picks=tuple(picks))


class TestSoftwareClassification:
    """!
    @brief Registry ``DisplayVersion`` to :class:`SoftwareStatus`.
    """

    def test_absent_key_is_not_installed(self) -> None:
        assert classify.classify_software(None, "13.00.13037") == classify.SoftwareStatus(False, False)

    def test_exact_version_is_current(self) -> None:
        status = classify.classify_software("13.00.13037", "13.00.13037")
        assert (status.installed, status.current) == (True, True)

    @pytest.mark.parametrize("recorded", ["13.00.13036", "13.00.13037 ", "13.0.13037", ""])
    def test_any_other_version_is_stale(self, recorded: str) -> None:
        status = classify.classify_software(recorded, "13.00.13037")
        assert (status.installed, status.current) == (True, False)
        assert status.version == recorded

    def test_inspect_software_reads_from_inspector(self) -> None:
        class _Reader:
            def read_software_version(self) -> str | None:
                return "13.00.13037"

        status = classify.inspect_software(_Reader(), FLAG_CONFIG)
        assert status.current is True


class TestCatalogClassification:
    """!
    @brief State cookie read results to :class:`CatalogStatus`.
    """

    def test_absent_cookie_is_missing(self) -> None:
        status = classify.classify_catalog(CookieAbsent("x"), FLAG_CONFIG)
        assert status == classify.CatalogStatus(CatalogState.MISSING, False, False)

    def test_malformed_cookie_is_invalid(self) -> None:
        status = classify.classify_catalog(CookieMalformed("x", "bad xml"), FLAG_CONFIG)
        assert status.state is CatalogState.INVALID
        assert status.detail == "bad xml"

    @pytest.mark.parametrize("config", [FLAG_CONFIG, PATH_CONFIG])
    @pytest.mark.parametrize(
        "picks",
        [
            (),
            (GranulePick("CAP", "DMO", "NotSelected"),),
            (GranulePick("cap", "dmo", "Selected"),),
            (GranulePick("CAP", "HAW", "Selected"), GranulePick("KIT", "DMO", "Selected")),
        ],
    )
    def test_without_baseline_pick_nothing_is_installed(self, config, picks) -> None:
        """!
        @brief Other fields never make the catalog count as locally installed.
        """

        cookie = _cookie(*picks, flag=True, source=config.catalog_network_path)
        status = classify.classify_catalog(cookie, config)
        assert status.installed is False
        assert status.state is CatalogState.MISSING

    def test_raw_network_signal_survives_without_baseline(self) -> None:
        status = classify.classify_catalog(_cookie(flag=True), FLAG_CONFIG)
        assert (status.installed, status.on_network) == (False, True)
        assert status.state is CatalogState.MISSING

    def test_flag_policy_network(self) -> None:
        status = classify.classify_catalog(_cookie(BASELINE, flag=True), FLAG_CONFIG)
        assert status.state is CatalogState.NETWORK
        assert (status.installed, status.on_network) == (True, True)

    def test_flag_policy_local(self) -> None:
        status = classify.classify_catalog(
            _cookie(BASELINE, flag=False, source=FLAG_CONFIG.catalog_network_path), FLAG_CONFIG
        )
        assert status.state is CatalogState.LOCAL_ONLY

    @pytest.mark.parametrize(
        "source",
        [
            r"\\10.0.9.29\2020catalogbeta",
            r"\\10.0.9.29\2020CATALOGBETA",
            r"\\10.0.9.29\2020CatalogBeta\\",
        ],
    )
    def test_source_path_policy_matches_case_insensitively(self, source: str) -> None:
        status = classify.classify_catalog(_cookie(BASELINE, source=source), PATH_CONFIG)
        assert status.state is CatalogState.NETWORK

    @pytest.mark.parametrize("source", [None, "", r"C:\ProgramData\2020\DSA\Catalogs", "D:"])
    def test_source_path_policy_local_sources(self, source) -> None:
        status = classify.classify_catalog(_cookie(BASELINE, flag=True, source=source), PATH_CONFIG)
        assert status.state is CatalogState.LOCAL_ONLY
        assert status.on_network is False

    @pytest.mark.parametrize("source", [r"\\10.0.9.30\2020catalogbeta", r"\\server\other", "http://catalogs"])
    def test_source_path_policy_unknown_location_is_invalid(self, source: str) -> None:
        status = classify.classify_catalog(_cookie(BASELINE, source=source), PATH_CONFIG)
        assert status.state is CatalogState.INVALID
        assert source in (status.detail or "")
        assert "\\\\\\\\" not in (status.detail or "")

    @pytest.mark.parametrize("source", ["A:", "A:\\", r"a:\ClientSetup", "A:/"])
    def test_source_path_policy_mapped_drive_counts_as_network(self, source: str) -> None:
        """!
        @brief The setup runs from the mapped drive, so DSA may record that drive.
        """

        status = classify.classify_catalog(_cookie(BASELINE, source=source), PATH_CONFIG)
        assert status.state is CatalogState.NETWORK
        assert status.on_network is True

    def test_source_path_policy_drive_is_local_without_mapping(self) -> None:
        config = dataclasses.replace(PATH_CONFIG, catalog_mount_drive=None)
        status = classify.classify_catalog(_cookie(BASELINE, source=r"A:\ClientSetup"), config)
        assert status.state is CatalogState.LOCAL_ONLY


def test_on_mount_drive_requires_drive_boundary() -> None:
    assert classify.on_mount_drive(r"A:\Catalogs", "A:")
    assert not classify.on_mount_drive("AB:", "A:")
    assert not classify.on_mount_drive(r"A:\Catalogs", None)
    assert not classify.on_mount_drive(None, "A:")


def test_inspect_catalog_uses_configured_path(tmp_path) -> None:
    """!
    @brief The cookie location comes from the configuration.
    """

    cookie = tmp_path / "cookie.xml"
    cookie.write_text(
        "<StateCookieInfo><Client><NetworkInfo><IsNetworkDeployment>1</IsNetworkDeployment>"
        "</NetworkInfo><UserPicks><GranulePicks>"
        '<GranulePick PlatformType="CAP" MfgCode="DMO" SelectionState="Selected"/>'
        "</GranulePicks></UserPicks></Client></StateCookieInfo>",
        encoding="utf-8",
    )
    config = dataclasses.replace(FLAG_CONFIG, state_cookie_path=str(cookie))

    assert classify.inspect_catalog(config).state is CatalogState.NETWORK
    missing = dataclasses.replace(FLAG_CONFIG, state_cookie_path=str(tmp_path / "nope.xml"))
    assert classify.inspect_catalog(missing).state is CatalogState.MISSING
