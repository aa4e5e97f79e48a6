"""!
@brief cap-netdeploy package root.
@details Modules under this namespace inspect the 2020 software and catalog
installation state on a client and drive it toward the network-deployed
catalog in a single remediation pass.
"""

__all__ = [
    "main",
    "config",
    "constants",
    "state_cookie",
    "registry_tools",
    "classify",
    "command_runner",
    "actions",
    "driver",
    "errors",
    "report",
    "logging_ext",
    "version",
]
