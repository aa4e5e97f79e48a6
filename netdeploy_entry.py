"""!
@brief Shim entry point for cap-netdeploy.
@details Makes the package in ``src/`` importable before transferring control
to :func:`cap_netdeploy.main.main`, so the tool can be started from a checkout
or bundled into a single executable for login scripts.
"""
from __future__ import annotations

import os
import sys

__all__ = ["main"]

_REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
_SRC_PATH = os.path.join(_REPO_ROOT, "src")


def _prepend_src_to_sys_path() -> None:
    """!
    @brief Prepend the repository ``src`` directory to ``sys.path``.
    """

    if os.path.isdir(_SRC_PATH) and _SRC_PATH not in sys.path:
        sys.path.insert(0, _SRC_PATH)


def main() -> int:
    """!
    @brief Invoke the package entry point after preparing ``sys.path``.
    @returns Exit status propagated from :func:`cap_netdeploy.main.main`.
    """

    _prepend_src_to_sys_path()
    from cap_netdeploy.main import main as package_main

    return package_main()


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
