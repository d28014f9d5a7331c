"""Version information for the gateway."""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass

VERSION = "0.1.0"
GIT_COMMIT = "unknown"
BUILD_DATE = "unknown"


@dataclass(frozen=True)
class Info:
    version: str
    git_commit: str
    build_date: str
    python_version: str
    platform: str


def get_info() -> Info:
    """Return version and runtime information."""
    return Info(
        version=VERSION,
        git_commit=GIT_COMMIT,
        build_date=BUILD_DATE,
        python_version=platform.python_version(),
        platform=f"{sys.platform}/{platform.machine().lower()}",
    )