"""!
@brief Static defaults for the 2020 software and catalog remediation.
@details Centralises registry locations, expected version strings, share paths
and installer command lines. :mod:`cap_netdeploy.config` copies these values
into an immutable configuration object, so nothing else in the package reads
them directly.
"""
from __future__ import annotations

from typing import Tuple

try:  # pragma: no cover - Windows registry handles are optional on test hosts.
    import winreg
except ImportError:  # pragma: no cover - test scaffolding supplies substitutes.
    winreg = None  # type: ignore[assignment]


if winreg is not None:  # pragma: no branch - deterministic assignments.
    HKLM = winreg.HKEY_LOCAL_MACHINE
else:  # pragma: no cover - exercised implicitly in non-Windows CI.
    HKLM = 0x80000002


SOFTWARE_PRODUCT_CODE = "{5D4D912A-D5EE-4748-84B8-7C2C75EC4408}"
"""!
@brief MSI product code of the 2020 design software.
"""

SOFTWARE_REGISTRY_KEY = (
    r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall"
    r"\{5D4D912A-D5EE-4748-84B8-7C2C75EC4408}"
)
"""!
@brief Uninstall key holding the installed software ``DisplayVersion``.
"""

SOFTWARE_VERSION_VALUE = "DisplayVersion"

SOFTWARE_CURRENT_VERSION = "13.00.13037"
"""!
@brief Version string the fleet is expected to run, compared byte-for-byte.
"""

SOFTWARE_INSTALLER = r"\\10.0.9.29\2020software\Setup.exe"

SOFTWARE_UNINSTALL_ARGS: Tuple[str, ...] = ("/passive", "/forcerestart")
"""!
@brief ``msiexec /x`` flags; the reboot is required before reinstalling.
"""

CATALOG_REGISTRY_KEY = (
    r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall\20-20 COMMERCIAL CATALOGS"
)

CATALOG_UNINSTALL_VALUE = "UninstallString"

CATALOG_UNINSTALL_COMMAND = (
    r'C:\Program Files (x86)\2020\DSA\dsa.exe /removeall /rootpath "C:\ProgramData\2020\DSA"'
)
"""!
@brief The only catalog uninstall command line this tool will accept.
@details The registry value is compared against this string; the uninstaller
itself is launched from ``CATALOG_UNINSTALLER`` and ``CATALOG_UNINSTALL_ARGS``
so the executable path is never left to command line splitting.
"""

CATALOG_UNINSTALLER = r"C:\Program Files (x86)\2020\DSA\dsa.exe"

CATALOG_UNINSTALL_ARGS: Tuple[str, ...] = ("/removeall", "/rootpath", r"C:\ProgramData\2020\DSA")

STATE_COOKIE_PATH = r"C:\ProgramData\2020\DSA\2020Catalogs-StateCookie.xml"

CATALOG_NETWORK_PATH = r"\\10.0.9.29\2020catalogbeta"

CATALOG_MOUNT_DRIVE = "A:"

CATALOG_SETUP_RELATIVE = r"ClientSetup\setup.exe"

BASELINE_PLATFORM_TYPE = "CAP"
BASELINE_MFG_CODE = "DMO"
SELECTED_STATE = "Selected"

NETWORK_DETECTION_FLAG = "flag"
NETWORK_DETECTION_SOURCE_PATH = "source-path"
NETWORK_DETECTION_POLICIES = (NETWORK_DETECTION_FLAG, NETWORK_DETECTION_SOURCE_PATH)

SUCCESS_PAUSE_SECONDS = 10.0
FAILURE_PAUSE_SECONDS = 300.0

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_UNSUCCESSFUL = 2

LOG_DIRECTORY_NAME = "cap-netdeploy"
