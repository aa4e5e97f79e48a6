"""!
@brief Remediation actions for the software and the catalog.
@details :class:`RemediationActions` is the production implementation of the
:class:`Remediator` capability interface consumed by
:mod:`cap_netdeploy.driver`. Each method launches one logical external
operation through :mod:`cap_netdeploy.command_runner` and raises
:class:`~cap_netdeploy.errors.CommandFailedError` on failure. The catalog
uninstaller only runs after its registry command line passed the exact-match
integrity check, and then from a fixed argument vector.
"""
from __future__ import annotations

from typing import Protocol

from . import command_runner, logging_ext
from .config import RemediationConfig
from .errors import IntegrityMismatchError, RegistryReadError

NET_EXECUTABLE = "net"
MSIEXEC_EXECUTABLE = "msiexec"


class Remediator(Protocol):
    """!
    @brief Capabilities the driver may invoke.
    """

    def install_software(self) -> None: ...

    def uninstall_software(self) -> None: ...

    def install_catalog(self) -> None: ...

    def uninstall_catalog(self) -> None: ...

    def mount_share(self) -> None: ...


class UninstallCommandReader(Protocol):
    def read_uninstall_command(self) -> str | None: ...


def verify_uninstall_command(actual: str, expected: str) -> None:
    """!
    @brief Refuse any uninstall command line other than ``expected``.
    @details Byte-for-byte comparison: case, quoting and whitespace all count.
    @raises IntegrityMismatchError On any difference.
    """

    if actual != expected:
        raise IntegrityMismatchError(actual, expected)


class RemediationActions:
    """!
    @brief Runs the real installers, uninstallers and ``net use`` commands.
    """

    def __init__(self, config: RemediationConfig, inspector: UninstallCommandReader) -> None:
        self._config = config
        self._inspector = inspector

    def install_software(self) -> None:
        command_runner.check_command(
            [self._config.software_installer],
            event="software_install",
            description="Install command",
            human_message="Launching the 2020 software installer...",
        )

    def uninstall_software(self) -> None:
        command_runner.check_command(
            [
                MSIEXEC_EXECUTABLE,
                "/x",
                self._config.software_product_code,
                *self._config.software_uninstall_args,
            ],
            event="software_uninstall",
            description="Uninstall command",
        )

    def mount_share(self) -> None:
        """!
        @brief Map the catalog share to the configured drive letter.
        @details Any existing mapping of the drive is removed first; that step
        fails harmlessly when nothing is mapped, so its result is only logged.
        """

        drive = self._config.catalog_mount_drive
        if not drive:
            return

        unmap = command_runner.run_command(
            [NET_EXECUTABLE, "use", drive, "/delete"],
            event="share_unmap",
            expect_failure=True,
        )
        if not unmap.succeeded:
            logging_ext.get_human_logger().debug(
                "Ignoring failed unmap of %s (exit code %s)", drive, unmap.returncode
            )

        command_runner.check_command(
            [NET_EXECUTABLE, "use", drive, self._config.catalog_network_path, "/persistent:no"],
            event="share_mount",
            description="NET USE command",
        )

    def install_catalog(self) -> None:
        if self._config.catalog_mount_drive:
            self.mount_share()
        command_runner.check_command(
            [self._config.catalog_setup_path()],
            event="catalog_install",
            description="Setup command",
        )

    def uninstall_catalog(self) -> None:
        """!
        @brief Run the catalog uninstaller recorded in the registry.
        @details The recorded command line only gates the launch. The process is
        started from the configured executable and argument list so the program
        that runs does not depend on how Windows splits an unquoted path.
        @raises RegistryReadError When the uninstall key is missing or unreadable.
        @raises IntegrityMismatchError When the recorded command is unexpected;
        nothing is launched in that case.
        """

        recorded = self._inspector.read_uninstall_command()
        if recorded is None:
            raise RegistryReadError(
                f"Cannot open registry key for uninstall: {self._config.catalog_registry_key}"
            )
        verify_uninstall_command(recorded, self._config.catalog_uninstall_command)
        logging_ext.get_machine_logger().info(
            "catalog_uninstall_verified",
            extra=logging_ext.build_event_extra("catalog_uninstall_verified", command=recorded),
        )
        command_runner.check_command(
            [self._config.catalog_uninstaller, *self._config.catalog_uninstall_args],
            event="catalog_uninstall",
            description="Uninstall command",
        )


__all__ = [
    "RemediationActions",
    "Remediator",
    "verify_uninstall_command",
]
