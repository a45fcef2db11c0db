from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError, version as pkg_version


def detect_version() -> str:
    env = os.environ.get("FARMAGUARDIA_VERSION")
    if env:
        return env
    try:
        return pkg_version("farmaguardia")
    except PackageNotFoundError:
        return "0.0.0"


APP_VERSION = detect_version()
