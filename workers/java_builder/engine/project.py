"""
MavenProject — one parsed project and its build phases.

Layout (relative to the project directory):
    <source_root>/**/*.java     sources (default src/main/java)
    src/main/resources/**       copied verbatim into classes/
    target/classes/             javac output
    target/<artifactId>-<version>.jar

Phases: compile → [package]. Compilation runs javac as an external process;
packaging writes the archive with zipfile, including a manifest whose
Main-Class comes from the descriptor.
"""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from java_builder import BUILDER_NAME
from java_builder.errors import BuildFailure
from java_builder.io.schema import BuildMode, Coordinate, ProjectDescriptor

if TYPE_CHECKING:
    from java_builder.engine.environment import BuildEnvironment

logger = logging.getLogger(__name__)


class MavenProject:
    """A project descriptor bound to a directory inside one BuildEnvironment."""

    def __init__(self, env: "BuildEnvironment", directory: Path, descriptor: ProjectDescriptor):
        self.env = env
        self.directory = directory
        self.descriptor = descriptor

    # -----------------------------------------------------------------
    # Layout
    # -----------------------------------------------------------------

    @property
    def coordinate(self) -> Coordinate:
        return self.descriptor.coordinate

    @property
    def source_directory(self) -> Path:
        return self.directory / self.descriptor.source_root

    @property
    def resource_directory(self) -> Path:
        return self.directory / self.env.profile.resource_root

    @property
    def target_directory(self) -> Path:
        return self.directory / "target"

    @property
    def classes_directory(self) -> Path:
        return self.target_directory / "classes"

    def get_directory(self) -> Path:
        return self.directory

    def get_main_class(self) -> Optional[str]:
        return self.descriptor.main_class

    def get_target(self) -> Path:
        return self.target_directory / f"{self.coordinate.artifact_id}-{self.coordinate.version}.jar"

    # -----------------------------------------------------------------
    # Classpath
    # -----------------------------------------------------------------

    def dependency_paths(self, include_test: bool = False) -> List[Path]:
        paths: List[Path] = []
        for dependency in self.descriptor.dependencies:
            if dependency.scope == "test" and not include_test:
                continue
            paths.append(self.env.resolve(dependency))
        return paths

    def get_classpath(self, include_test: bool = False) -> str:
        """Classes directory plus every resolved dependency, os.pathsep-joined."""
        entries = [self.classes_directory] + self.dependency_paths(include_test)
        return os.pathsep.join(str(p) for p in entries)

    # -----------------------------------------------------------------
    # Build phases
    # -----------------------------------------------------------------

    def _sources(self) -> List[Path]:
        if not self.source_directory.is_dir():
            return []
        return sorted(self.source_directory.rglob("*.java"))

    def _copy_resources(self) -> None:
        if self.resource_directory.is_dir():
            shutil.copytree(self.resource_directory, self.classes_directory, dirs_exist_ok=True)

    def _compile(self, sources: List[Path]) -> None:
        toolchain = self.env.toolchain
        cmd = [toolchain.javac, "-encoding", "UTF-8", "-d", str(self.classes_directory)]
        dependencies = self.dependency_paths()
        if dependencies:
            cmd += ["-cp", os.pathsep.join(str(p) for p in dependencies)]
        if self.env.debug:
            cmd.append("-g")
        cmd += [str(s) for s in sources]

        self.env.log(f"Compiling {len(sources)} source file(s) for {self.coordinate}")
        if self.env.debug:
            self.env.log(" ".join(cmd))

        t0 = time.monotonic()
        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.directory),
                capture_output=True,
                text=True,
                timeout=toolchain.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise BuildFailure(
                f"Compilation of {self.coordinate} timed out after {toolchain.timeout}s"
            ) from e
        except OSError as e:
            raise BuildFailure(f"Could not run {toolchain.javac}: {e}") from e
        duration = int((time.monotonic() - t0) * 1000)

        self.env.emit(result.stdout)
        self.env.emit(result.stderr)
        logger.debug("javac finished in %d ms (exit %d)", duration, result.returncode)

        if result.returncode != 0:
            raise BuildFailure(
                f"Compilation of {self.coordinate} failed (javac exit code {result.returncode})"
            )

    def _manifest(self) -> str:
        lines = ["Manifest-Version: 1.0", f"Created-By: {BUILDER_NAME}"]
        main_class = self.get_main_class()
        if main_class:
            lines.append(f"Main-Class: {main_class}")
        return "\r\n".join(lines) + "\r\n\r\n"

    def _package(self, include_sources: bool) -> Path:
        target = self.get_target()
        target.parent.mkdir(parents=True, exist_ok=True)
        self.env.log(f"Packaging {target.name}")

        with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED) as jar:
            jar.writestr("META-INF/MANIFEST.MF", self._manifest())
            for path in sorted(self.classes_directory.rglob("*")):
                if path.is_file():
                    jar.write(path, path.relative_to(self.classes_directory).as_posix())
            if include_sources:
                for path in self._sources():
                    jar.write(path, path.relative_to(self.source_directory).as_posix())
        return target

    def build(self, mode: BuildMode = BuildMode.COMPILE) -> None:
        """
        Compile, and for the packaging modes also write the target archive.

        Raises
        ------
        BuildFailure
            Compilation failed, timed out, or a dependency is unresolvable.
        """
        self.classes_directory.mkdir(parents=True, exist_ok=True)
        self._copy_resources()

        sources = self._sources()
        if sources:
            self._compile(sources)
        else:
            self.env.log(f"No sources to compile in {self.source_directory}")

        if mode != BuildMode.COMPILE:
            self._package(include_sources=mode == BuildMode.PACKAGE_WITH_SOURCES)
