"""
Dependency inferrer — turn the host classpath into synthetic coordinates.

Everything already on the host's classpath is declared as a dependency of a
synthesized project, so the build engine compiles against it instead of
trying to resolve it from a repository.

The host supplies ``ClasspathProvider`` records, most specific first. Each
local (``file:``) entry becomes one coordinate. Surefire booster archives
are unwrapped one level: the coordinates come from their manifest
``Class-Path`` instead of from the generated archive itself.
"""
from __future__ import annotations

import logging
import os
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse
from urllib.request import url2pathname

from java_builder.engine.environment import BuildEnvironment
from java_builder.io.schema import Coordinate
from java_builder.policy.profile import BuildProfile

logger = logging.getLogger(__name__)

MANIFEST_PATH = "META-INF/MANIFEST.MF"


@dataclass(frozen=True)
class ClasspathProvider:
    """One link of the host's class-loading chain: a name and its URLs."""
    name: str
    urls: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_paths(cls, name: str, paths: Iterable[os.PathLike | str]) -> ClasspathProvider:
        return cls(name=name, urls=tuple(Path(p).absolute().as_uri() for p in paths))


def default_classpath_providers() -> List[ClasspathProvider]:
    """Providers derived from the ``CLASSPATH`` environment variable."""
    classpath = os.environ.get("CLASSPATH", "")
    paths = [p for p in classpath.split(os.pathsep) if p]
    if not paths:
        return []
    return [ClasspathProvider.from_paths("CLASSPATH", paths)]


def _url_to_path(url: str) -> Path:
    return Path(url2pathname(urlparse(url).path))


# ── Coordinate synthesis ─────────────────────────────────────────────────────

def fake_artifact_id(env: BuildEnvironment, name: str, profile: BuildProfile | None = None) -> str:
    """
    Derive an artifactId from a file name, unique within *env*.

    ``foo-1.2.jar`` → ``foo-1``; ``classes`` → ``classes``;
    ``.hidden`` → ``dependency``. Collisions get ``-1``, ``-2``, ...
    """
    if profile is None:
        profile = env.profile
    dot = name.find(".")
    if dot < 0:
        prefix = name
    elif dot == 0:
        prefix = profile.placeholder_artifact_id
    else:
        prefix = name[:dot]

    group_id = profile.default_group_id
    if not env.contains_project(group_id, prefix):
        return prefix
    i = 1
    while env.contains_project(group_id, f"{prefix}-{i}"):
        i += 1
    return f"{prefix}-{i}"


def fake_dependency(env: BuildEnvironment, path: Path, profile: BuildProfile | None = None) -> Coordinate:
    """Synthesize a coordinate for *path* and register it as resolved."""
    if profile is None:
        profile = env.profile
    coordinate = Coordinate(
        group_id=profile.default_group_id,
        artifact_id=fake_artifact_id(env, path.name, profile),
        version=profile.dependency_version,
    )
    env.register_synthetic_descriptor(path, coordinate)
    return coordinate


# ── Booster archives ─────────────────────────────────────────────────────────

def read_manifest_class_path(manifest: str) -> List[str]:
    """
    Return the main-section ``Class-Path`` elements of a JAR manifest.

    Continuation lines (starting with a single space) are unfolded first.
    """
    logical: List[str] = []
    for line in manifest.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        if line.startswith(" ") and logical:
            logical[-1] += line[1:]
        elif not line:
            break  # end of main section
        else:
            logical.append(line)

    for entry in logical:
        key, sep, value = entry.partition(":")
        if sep and key.strip().lower() == "class-path":
            return value.split()
    return []


def booster_class_path(path: Path, base_url: str) -> List[Path]:
    """
    Resolve the ``Class-Path`` of the booster archive at *path*.

    Unreadable archives are logged and yield no entries.
    """
    try:
        with zipfile.ZipFile(path) as jar:
            try:
                manifest = jar.read(MANIFEST_PATH).decode("utf-8")
            except KeyError:
                return []
    except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as e:
        logger.warning("Could not read booster archive %s: %s", path, e)
        return []

    paths: List[Path] = []
    for element in read_manifest_class_path(manifest):
        url = urljoin(base_url, element)
        if urlparse(url).scheme != "file":
            logger.warning("Skipping non-local booster entry %s", url)
            continue
        paths.append(_url_to_path(url))
    return paths


# ── Public API ───────────────────────────────────────────────────────────────

def infer_dependencies(
    env: BuildEnvironment,
    providers: Optional[Sequence[ClasspathProvider]] = None,
    profile: BuildProfile | None = None,
) -> List[Coordinate]:
    """
    Synthesize a coordinate for every local entry of every provider.

    Parameters
    ----------
    env : BuildEnvironment
        Receives a synthetic registration per coordinate; also the source
        of truth for artifactId uniqueness.
    providers : Sequence[ClasspathProvider], optional
        Most specific first. Defaults to ``default_classpath_providers()``.

    Returns
    -------
    List[Coordinate]
        In encounter order; ``(groupId, artifactId)`` pairs are unique.
    """
    if profile is None:
        profile = env.profile
    if providers is None:
        providers = default_classpath_providers()
    booster = re.compile(profile.booster_pattern)

    result: List[Coordinate] = []
    for provider in providers:
        for url in provider.urls:
            if urlparse(url).scheme != "file":
                continue
            path = _url_to_path(url)
            if booster.fullmatch(url):
                for element in booster_class_path(path, url):
                    result.append(fake_dependency(env, element, profile))
                continue
            result.append(fake_dependency(env, path, profile))

    env.log(f"Inferred {len(result)} dependencies from {len(providers)} classpath provider(s)")
    return result
