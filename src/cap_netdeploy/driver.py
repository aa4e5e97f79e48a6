"""!
@brief Single-pass remediation driver.
@details Walks the software phase, then the catalog phase, invoking at most
one remediation action per state and re-classifying exactly once after it.
The driver returns an :class:`~cap_netdeploy.report.Outcome`; printing,
pausing and exiting are left to :mod:`cap_netdeploy.report` and
:mod:`cap_netdeploy.main`.
"""
from __future__ import annotations

import logging
from typing import Callable

from . import classify, logging_ext
from .actions import Remediator
from .classify import CatalogState, CatalogStatus, SoftwareStatus
from .config import RemediationConfig
from .errors import RemediationError
from .report import Outcome

CatalogInspector = Callable[[], CatalogStatus]
SoftwareInspector = Callable[[], SoftwareStatus]

MSG_SOFTWARE_CHECK_FAILED = "Unable to check software status."
MSG_SOFTWARE_INSTALL_FAILED = (
    "Unable to install the 2020 software. Restart your computer and try again manually."
)
MSG_SOFTWARE_INSTALL_STARTED = "Complete the install process manually and run this again afterward."
MSG_SOFTWARE_UNINSTALL_FAILED = (
    "Unable to uninstall the 2020 software. Restart your computer and try again manually."
)
MSG_SOFTWARE_UNINSTALLED = (
    "Software uninstall will require a reboot. After reboot, run again to update software."
)
MSG_CATALOG_CHECK_FAILED = "Unable to check for Network Deployment."
MSG_CATALOG_ON_NETWORK = "You are using the 2020 Network Deployment. Nice."
MSG_CATALOG_UNINSTALL_FAILED = "Can't run the uninstaller for the catalog. Try running it yourself."
MSG_CATALOG_STILL_LOCAL = (
    "Finish uninstalling the local catalog, then run this again. You can close this window."
)
MSG_CATALOG_INSTALL_FAILED = "Failed to install the network catalog."
MSG_CATALOG_INSTALLED = "Looks good. Network catalog is installed."
MSG_CATALOG_INSTALL_INCOMPLETE = (
    "Finish installing the catalog by using the wizard. You can close this window."
)


class RemediationDriver:
    """!
    @brief Decide and run the next remediation step for this machine.
    @param config Immutable remediation configuration.
    @param remediator Capability object performing the side effects.
    @param software_inspector Returns the current :class:`SoftwareStatus`.
    @param catalog_inspector Returns the current :class:`CatalogStatus`.
    """

    def __init__(
        self,
        config: RemediationConfig,
        remediator: Remediator,
        *,
        software_inspector: SoftwareInspector,
        catalog_inspector: CatalogInspector | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._remediator = remediator
        self._inspect_software = software_inspector
        self._inspect_catalog = catalog_inspector or (lambda: classify.inspect_catalog(config))
        self._log = logger or logging_ext.get_human_logger()
        self._machine_log = logging_ext.get_machine_logger()

    def run(self) -> Outcome:
        """!
        @brief Execute the remediation pass and return its terminal outcome.
        """

        try:
            software = self._inspect_software()
        except RemediationError as exc:
            return Outcome.failure(MSG_SOFTWARE_CHECK_FAILED, exc)
        self._record_software(software)

        if not software.installed:
            self._log.info("2020 software is not installed.")
            try:
                self._remediator.install_software()
            except RemediationError as exc:
                return Outcome.failure(MSG_SOFTWARE_INSTALL_FAILED, exc)
            return Outcome.unsuccessful(MSG_SOFTWARE_INSTALL_STARTED)

        if not software.current:
            self._log.info("2020 software is out of date. Uninstalling current software...")
            try:
                self._remediator.uninstall_software()
            except RemediationError as exc:
                return Outcome.failure(MSG_SOFTWARE_UNINSTALL_FAILED, exc)
            return Outcome.unsuccessful(MSG_SOFTWARE_UNINSTALLED)

        self._log.info("Looks like the 2020 software is up to date. Let's check your catalog...")
        return self._run_catalog_phase()

    def _run_catalog_phase(self) -> Outcome:
        try:
            catalog = self._inspect_catalog()
        except RemediationError as exc:
            return Outcome.failure(MSG_CATALOG_CHECK_FAILED, exc)
        self._record_catalog(catalog)

        if catalog.state is CatalogState.INVALID:
            return Outcome.failure(MSG_CATALOG_CHECK_FAILED, RemediationError(catalog.detail or "invalid state"))
        if catalog.state is CatalogState.NETWORK:
            return Outcome.success(MSG_CATALOG_ON_NETWORK)

        if catalog.state is CatalogState.LOCAL_ONLY:
            self._log.info("Looks like you have the catalog installed locally, not on the network.")
            try:
                self._remediator.uninstall_catalog()
            except RemediationError as exc:
                return Outcome.failure(MSG_CATALOG_UNINSTALL_FAILED, exc)

            self._log.info("Checking the catalog status again...")
            recheck = self._recheck_catalog()
            if recheck is None or recheck.state in (CatalogState.INVALID, CatalogState.LOCAL_ONLY):
                return Outcome.unsuccessful(MSG_CATALOG_STILL_LOCAL)

        self._log.info("Installing the network catalog...")
        try:
            self._remediator.install_catalog()
        except RemediationError as exc:
            return Outcome.failure(MSG_CATALOG_INSTALL_FAILED, exc)

        self._log.info("Checking the catalog status again...")
        recheck = self._recheck_catalog()
        if recheck is not None and recheck.state is CatalogState.NETWORK:
            return Outcome.success(MSG_CATALOG_INSTALLED)
        return Outcome.unsuccessful(MSG_CATALOG_INSTALL_INCOMPLETE)

    def diagnose(self) -> Outcome:
        """!
        @brief Classify both phases without running any remediation action.
        """

        try:
            software = self._inspect_software()
        except RemediationError as exc:
            return Outcome.failure(MSG_SOFTWARE_CHECK_FAILED, exc)
        self._record_software(software)
        if not software.installed:
            return Outcome.unsuccessful("2020 software is not installed; a run would launch the installer.")
        if not software.current:
            return Outcome.unsuccessful(
                f"2020 software version {software.version} is out of date; a run would uninstall it."
            )

        try:
            catalog = self._inspect_catalog()
        except RemediationError as exc:
            return Outcome.failure(MSG_CATALOG_CHECK_FAILED, exc)
        self._record_catalog(catalog)

        if catalog.state is CatalogState.INVALID:
            return Outcome.failure(MSG_CATALOG_CHECK_FAILED, RemediationError(catalog.detail or "invalid state"))
        if catalog.state is CatalogState.NETWORK:
            return Outcome.success(MSG_CATALOG_ON_NETWORK)
        if catalog.state is CatalogState.LOCAL_ONLY:
            return Outcome.unsuccessful(
                "Catalog is installed locally; a run would uninstall it and install the network catalog."
            )
        return Outcome.unsuccessful("Catalog is not installed; a run would install the network catalog.")

    def _recheck_catalog(self) -> CatalogStatus | None:
        try:
            catalog = self._inspect_catalog()
        except RemediationError as exc:
            self._log.warning("Catalog re-check failed: %s", exc)
            return None
        self._record_catalog(catalog)
        return catalog

    def _record_software(self, software: SoftwareStatus) -> None:
        self._record(
            "software_status",
            installed=software.installed,
            current=software.current,
            version=software.version,
        )

    def _record_catalog(self, catalog: CatalogStatus) -> None:
        self._record(
            "catalog_status",
            state=catalog.state.value,
            installed=catalog.installed,
            on_network=catalog.on_network,
            detail=catalog.detail,
        )

    def _record(self, event: str, **fields: object) -> None:
        self._machine_log.info(event, extra=logging_ext.build_event_extra(event, **fields))


__all__ = ["RemediationDriver"]
