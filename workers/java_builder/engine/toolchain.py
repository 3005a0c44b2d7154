"""
Java toolchain identity — which javac/java binaries a build uses.

Captured once per (javac, java) pair for the lifetime of the process and
recorded alongside build output for provenance.
"""
from __future__ import annotations

import subprocess
from typing import Dict, List, Tuple

from pydantic import BaseModel


class JavaToolchain(BaseModel):
    """External binaries driven by the local build engine."""
    javac: str = "javac"
    java: str = "java"
    javac_version: str = "unknown"
    java_version: str = "unknown"
    timeout: int = 120  # seconds, per external process


_cached_toolchains: Dict[Tuple[str, str], JavaToolchain] = {}


def _run_quiet(cmd: List[str], timeout: int = 10) -> str:
    """Run a command and return its first output line, or "unknown"."""
    try:
        r = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    # javac/java print -version to stderr on older JDKs
    out = (r.stdout or r.stderr).strip()
    return out.splitlines()[0] if out else "unknown"


def capture_toolchain(javac: str = "javac", java: str = "java", timeout: int = 120) -> JavaToolchain:
    """Capture toolchain identity. Cached after first call per binary pair."""
    key = (javac, java)
    cached = _cached_toolchains.get(key)
    if cached is not None:
        return cached.model_copy(update={"timeout": timeout})

    toolchain = JavaToolchain(
        javac=javac,
        java=java,
        javac_version=_run_quiet([javac, "-version"]),
        java_version=_run_quiet([java, "-version"]),
        timeout=timeout,
    )
    _cached_toolchains[key] = toolchain
    return toolchain
