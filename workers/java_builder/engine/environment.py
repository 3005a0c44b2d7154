"""
BuildEnvironment — per-build configuration and known-project registry.

One environment is created per orchestration call and discarded afterwards.
It owns:
  - the verbose/debug switches and the diagnostics sink,
  - every project parsed during the call (keyed by groupId/artifactId),
  - synthetic descriptors registered for classpath entries, which the
    engine treats as already resolved local artifacts.

Dependency resolution is local only: synthetic registrations, projects
parsed in this environment, then an existing ~/.m2/repository file.
Nothing is ever downloaded.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from java_builder.errors import BuildFailure, DescriptorParseError
from java_builder.engine.toolchain import JavaToolchain
from java_builder.io.diagnostics import LineSink
from java_builder.io.pom import parse_pom
from java_builder.io.schema import Coordinate
from java_builder.policy.profile import BuildProfile

if TYPE_CHECKING:
    from java_builder.engine.project import MavenProject

logger = logging.getLogger(__name__)


class BuildEnvironment:
    """Configuration and project cache for a single build."""

    def __init__(
        self,
        err: Optional[LineSink] = None,
        verbose: bool = False,
        debug: bool = False,
        toolchain: Optional[JavaToolchain] = None,
        profile: Optional[BuildProfile] = None,
        local_repository: Optional[Path] = None,
    ):
        self.err = err
        self.verbose = verbose
        self.debug = debug
        self.toolchain = toolchain or JavaToolchain()
        self.profile = profile or BuildProfile.v1()
        self.local_repository = local_repository or Path.home() / ".m2" / "repository"

        self._projects: Dict[Tuple[str, str], "MavenProject"] = {}
        self._synthetic: Dict[Tuple[str, str], Path] = {}

    # -----------------------------------------------------------------
    # Diagnostics
    # -----------------------------------------------------------------

    def emit(self, text: str) -> None:
        """Route raw engine output to the sink, or to the log if there is none."""
        if not text:
            return
        if self.err is not None:
            self.err.write(text if text.endswith("\n") else text + "\n")
            return
        for line in text.splitlines():
            logger.info(line)

    def log(self, message: str) -> None:
        """Progress message, shown only in verbose mode."""
        if self.verbose:
            self.emit(f"[INFO] {message}")
        logger.debug(message)

    # -----------------------------------------------------------------
    # Known projects
    # -----------------------------------------------------------------

    def contains_project(self, group_id: str, artifact_id: str) -> bool:
        key = (group_id, artifact_id)
        return key in self._projects or key in self._synthetic

    def register_synthetic_descriptor(self, path: Path, coordinate: Coordinate) -> None:
        """Mark a local classpath entry as an already-resolved artifact."""
        self._synthetic[coordinate.key] = Path(path)
        if self.debug:
            self.log(f"Registered {coordinate} -> {path}")

    def synthetic_path(self, coordinate: Coordinate) -> Optional[Path]:
        return self._synthetic.get(coordinate.key)

    def _register_project(self, project: "MavenProject") -> None:
        self._projects[project.coordinate.key] = project

    # -----------------------------------------------------------------
    # Parsing
    # -----------------------------------------------------------------

    def parse(self, path: Path) -> "MavenProject":
        """Parse the pom.xml at *path*; its directory becomes the project root."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise DescriptorParseError(f"Cannot read {path}: {e}") from e
        return self.parse_bytes(data, Path(path).parent)

    def parse_bytes(self, data: bytes, directory: Path) -> "MavenProject":
        """Parse in-memory pom.xml bytes for a project rooted at *directory*."""
        from java_builder.engine.project import MavenProject

        descriptor = parse_pom(data, self.profile)
        project = MavenProject(self, Path(directory), descriptor)
        self._register_project(project)
        self.log(f"Parsed {descriptor.coordinate} in {directory}")
        return project

    # -----------------------------------------------------------------
    # Resolution
    # -----------------------------------------------------------------

    def _repository_path(self, coordinate: Coordinate) -> Path:
        group_path = Path(*coordinate.group_id.split("."))
        name = f"{coordinate.artifact_id}-{coordinate.version}.jar"
        return self.local_repository / group_path / coordinate.artifact_id / coordinate.version / name

    def resolve(self, coordinate: Coordinate) -> Path:
        """
        Return the local classpath element for *coordinate*.

        Raises
        ------
        BuildFailure
            If the dependency is not available locally.
        """
        synthetic = self._synthetic.get(coordinate.key)
        if synthetic is not None:
            return synthetic

        project = self._projects.get(coordinate.key)
        if project is not None:
            target = project.get_target()
            return target if target.exists() else project.classes_directory

        candidate = self._repository_path(coordinate)
        if candidate.is_file():
            return candidate

        raise BuildFailure(f"Could not resolve dependency {coordinate} (no local artifact)")

    @staticmethod
    def copy_file(source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
