"""
Project synthesizer — from a source unit to a buildable MavenProject.

Three paths, decided from the source unit:
  1. ``pom.xml``                    → parse it directly
  2. ``.../src/main/java/a/b/Foo.java`` inside a real project
                                    → reuse the ancestor pom.xml
  3. anything else (raw text, or a file outside a project layout)
                                    → write a throwaway project into a
                                      TemporaryWorkspace with a synthesized
                                      pom.xml and inferred dependencies
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from java_builder.core.dependency_inferrer import ClasspathProvider, infer_dependencies
from java_builder.core.source_identifier import (
    SOURCE_SUFFIX,
    TypeIdentity,
    identify_file,
    identify_source,
)
from java_builder.core.workspace import TemporaryWorkspace
from java_builder.engine.environment import BuildEnvironment
from java_builder.engine.project import MavenProject
from java_builder.errors import (
    MalformedSourceError,
    PathMismatchError,
    SerializationError,
    WorkspaceCreationError,
)
from java_builder.io.pom import render_pom
from java_builder.io.schema import Coordinate, ProjectDescriptor
from java_builder.policy.profile import BuildProfile

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """A ready-to-build project and, for synthesized projects, its workspace."""
    project: MavenProject
    main_class: Optional[str] = None
    workspace: Optional[TemporaryWorkspace] = None

    @property
    def synthesized(self) -> bool:
        return self.workspace is not None

    def cleanup(self) -> None:
        if self.workspace is not None:
            self.workspace.cleanup()


class ProjectSynthesizer:
    """Decides how a source unit becomes a project, and materializes it."""

    def __init__(
        self,
        env: BuildEnvironment,
        providers: Optional[Sequence[ClasspathProvider]] = None,
        profile: Optional[BuildProfile] = None,
        workspace_parent: Optional[Path] = None,
    ):
        self.env = env
        self.providers = providers
        self.profile = profile or env.profile
        self.workspace_parent = workspace_parent

    # -----------------------------------------------------------------
    # Entry point
    # -----------------------------------------------------------------

    def synthesize(self, file: Optional[Path] = None, reader: Optional[Iterable[str]] = None) -> SynthesisResult:
        """
        Produce a project for *file* (if it exists) or for the text in *reader*.

        Raises
        ------
        MalformedSourceError
            Neither an existing file nor source text was given, or the file
            is not a .java source.
        PathMismatchError
            The file's location contradicts its package/class.
        WorkspaceCreationError
            The temporary project could not be laid out.
        """
        if file is None or not file.exists():
            if reader is None:
                raise MalformedSourceError(
                    f"No source to build: {file} does not exist and no source text was given"
                )
            return self.write_temporary_project(reader, file.name if file is not None else None)

        if file.name == self.profile.descriptor_filename:
            return SynthesisResult(project=self.env.parse(file))

        identity = identify_file(file)
        project = self.locate_project(file, identity)
        if project is not None:
            return SynthesisResult(project=project, main_class=identity.fully_qualified_name)

        with open(file, encoding="utf-8") as f:
            return self.write_temporary_project(f, file.name)

    # -----------------------------------------------------------------
    # Existing project layout
    # -----------------------------------------------------------------

    def locate_project(self, file: Path, identity: TypeIdentity) -> Optional[MavenProject]:
        """
        Return the real project a source file belongs to, if any.

        The file must sit at ``<root>/<package path>/<Name>.java``; when
        ``<root>`` ends in ``src/main/java/`` and a pom.xml exists above it,
        that project is parsed and returned. Performs no writes.
        """
        fqn = identity.fully_qualified_name
        path = str(file.absolute())
        if not path.replace(os.sep, ".").endswith(f".{fqn}{SOURCE_SUFFIX}"):
            raise PathMismatchError(f"Class {fqn} in invalid directory: {path}")

        root = path[: len(path) - len(fqn) - len(SOURCE_SUFFIX)]
        source_root = self.profile.source_root
        if not root.replace(os.sep, "/").endswith("/" + source_root):
            return None

        descriptor_file = Path(root[: len(root) - len(source_root)]) / self.profile.descriptor_filename
        if not descriptor_file.exists():
            logger.debug("No %s above %s; synthesizing a project", descriptor_file.name, file)
            return None
        logger.info("Building %s in the context of %s", file, descriptor_file)
        return self.env.parse(descriptor_file)

    # -----------------------------------------------------------------
    # Synthesis
    # -----------------------------------------------------------------

    def write_temporary_project(self, reader: Iterable[str], file_name: Optional[str] = None) -> SynthesisResult:
        """
        Lay out a throwaway project for the source text in *reader*.

        *file_name* is the name the text came from (or was given under); it
        supplies the simple name when the text declares no public type.
        The workspace is removed again if any step after its creation fails.
        """
        if file_name is not None and not file_name.endswith(SOURCE_SUFFIX):
            file_name = None
        workspace = TemporaryWorkspace.create(self.workspace_parent)
        try:
            source = workspace.path / SOURCE_SUFFIX
            with open(source, "w", encoding="utf-8") as out:
                for line in reader:
                    out.write(line.rstrip("\r\n"))
                    out.write("\n")

            with open(source, encoding="utf-8") as f:
                identity = identify_source(f, file_name or source.name)
            result = workspace.path / self.profile.source_root / identity.source_path
            try:
                result.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise WorkspaceCreationError(f"Could not make directory for {result}: {e}") from e
            try:
                source.rename(result)
            except OSError as e:
                raise WorkspaceCreationError(
                    f"Could not move {source} into the correct location: {e}"
                ) from e

            descriptor = ProjectDescriptor(
                coordinate=Coordinate(
                    group_id=self.profile.default_group_id,
                    artifact_id=identity.simple_name,
                    version=self.profile.default_version,
                ),
                main_class=identity.fully_qualified_name,
                dependencies=infer_dependencies(self.env, self.providers, self.profile),
            )
            project = self.fake_pom(workspace.path, descriptor)
        except BaseException:
            workspace.cleanup()
            raise

        logger.info("Synthesized %s in %s", descriptor.coordinate, workspace.path)
        return SynthesisResult(
            project=project,
            main_class=identity.fully_qualified_name,
            workspace=workspace,
        )

    def fake_pom(self, directory: Path, descriptor: ProjectDescriptor) -> MavenProject:
        """
        Write *descriptor* as ``<directory>/pom.xml`` and return the project
        parsed from the very same bytes.
        """
        data = render_pom(descriptor, self.profile)
        self._write(directory / self.profile.descriptor_filename, data)
        return self.env.parse_bytes(data, directory)

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        try:
            path.write_bytes(data)
        except OSError as e:
            raise SerializationError(f"Could not write {path}: {e}") from e
