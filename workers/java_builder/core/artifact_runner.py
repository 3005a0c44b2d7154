"""
Artifact runner — hand a built project's main class to a run collaborator.

The execution context is the project's computed classpath as ``file:`` URLs
(directories get a trailing ``/``, archives do not) plus the resolved main
class. Actually executing the class is the collaborator's business; the
default one launches ``java`` as a child process.
"""
from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Tuple

from java_builder.engine.project import MavenProject
from java_builder.engine.toolchain import JavaToolchain
from java_builder.errors import BuildFailure, NoMainClassError
from java_builder.io.diagnostics import LineSink
from java_builder.io.schema import RunResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionContext:
    """Classpath-scoped context in which a main class is loaded."""
    main_class: str
    urls: Tuple[str, ...]

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(url[len("file:"):].rstrip("/") or "/" for url in self.urls)

    @property
    def classpath(self) -> str:
        return os.pathsep.join(self.paths)


class RunCollaborator(Protocol):
    def run(self, context: ExecutionContext) -> RunResult: ...


def resolve_main_class(
    explicit: Optional[str],
    scanned: Optional[str],
    project: MavenProject,
) -> str:
    """
    First of: the explicit name, the name found by scanning the source, the
    project's own manifest configuration.

    Raises
    ------
    NoMainClassError
        None of the three yields a name.
    """
    for candidate in (explicit, scanned, project.get_main_class()):
        if candidate:
            return candidate
    raise NoMainClassError(f"No main class found for project {project.coordinate}")


def build_execution_context(classpath: str, main_class: str) -> ExecutionContext:
    """Turn an os.pathsep-joined classpath into a URL-based context."""
    urls = []
    for entry in classpath.split(os.pathsep):
        if not entry:
            continue
        path = Path(entry).absolute().as_posix()
        urls.append("file:" + path + ("" if path.endswith(".jar") else "/"))
    return ExecutionContext(main_class=main_class, urls=tuple(urls))


class JavaProcessRunner:
    """Runs the main class in a fresh ``java`` process."""

    def __init__(self, toolchain: Optional[JavaToolchain] = None, sink: Optional[LineSink] = None):
        self.toolchain = toolchain or JavaToolchain()
        self.sink = sink

    def run(self, context: ExecutionContext) -> RunResult:
        cmd = [self.toolchain.java, "-cp", context.classpath, context.main_class]
        logger.info("Running %s", context.main_class)
        try:
            r = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.toolchain.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise BuildFailure(
                f"{context.main_class} did not finish within {self.toolchain.timeout}s"
            ) from e
        except OSError as e:
            raise BuildFailure(f"Could not run {self.toolchain.java}: {e}") from e

        if self.sink is not None and r.stderr:
            self.sink.write(r.stderr)
            self.sink.flush()
        return RunResult(
            main_class=context.main_class,
            classpath=list(context.paths),
            exit_code=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )


class ArtifactRunner:
    """Resolve, contextualize, delegate."""

    def __init__(self, collaborator: RunCollaborator):
        self.collaborator = collaborator

    def run(
        self,
        project: MavenProject,
        explicit_main_class: Optional[str] = None,
        scanned_main_class: Optional[str] = None,
    ) -> RunResult:
        main_class = resolve_main_class(explicit_main_class, scanned_main_class, project)
        context = build_execution_context(project.get_classpath(False), main_class)
        return self.collaborator.run(context)
