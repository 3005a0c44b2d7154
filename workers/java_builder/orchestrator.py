"""
Build orchestrator — one synthesized or located project, one build.

Every public call:
  1. creates its own BuildEnvironment (verbose/debug from the option bag)
     and diagnostics sink,
  2. synthesizes or locates the project,
  3. drives the engine (compile / package / package with sources),
  4. always flushes the sink and removes the temporary workspace.

Failures go to the caller's error writer when there is one (the call then
returns a FAILED receipt); without a writer they are raised.
"""
from __future__ import annotations

import io
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Optional, Sequence, Union

from java_builder.core.artifact_runner import ArtifactRunner, JavaProcessRunner, RunCollaborator
from java_builder.core.dependency_inferrer import ClasspathProvider
from java_builder.core.synthesizer import ProjectSynthesizer, SynthesisResult
from java_builder.engine.environment import BuildEnvironment
from java_builder.engine.toolchain import JavaToolchain
from java_builder.errors import BuilderError, BuildFailure
from java_builder.io.diagnostics import LineSink, Writer, make_sink, report_exception
from java_builder.io.schema import BuildMode, BuildReceipt, BuildStatus, RunResult, now_iso
from java_builder.policy.profile import BuildProfile

logger = logging.getLogger(__name__)

Source = Union[str, Iterable[str]]


def _flag(options: Mapping[str, object], name: str) -> bool:
    value = options.get(name)
    return value is True or (isinstance(value, str) and value.lower() == "true")


class BuildOrchestrator:
    """Drives synthesis and the build engine for a host."""

    def __init__(
        self,
        error_writer: Optional[Writer] = None,
        options: Optional[Mapping[str, object]] = None,
        providers: Optional[Sequence[ClasspathProvider]] = None,
        profile: Optional[BuildProfile] = None,
        toolchain: Optional[JavaToolchain] = None,
        workspace_parent: Optional[Path] = None,
    ):
        """
        Args:
            error_writer: Destination for build output and failures. If None,
                failures are raised instead.
            options: Named-option bag; ``verbose`` and ``debug`` are read
                as ``"true"``/``True``.
            providers: Host classpath, most specific first. Defaults to the
                ``CLASSPATH`` environment variable.
            profile: Build constants (default ``BuildProfile.v1()``).
            toolchain: javac/java binaries and process timeout.
            workspace_parent: Where temporary workspaces are created
                (default: the system temp directory).
        """
        self.error_writer = error_writer
        self.options = dict(options or {})
        self.providers = providers
        self.profile = profile or BuildProfile.v1()
        self.toolchain = toolchain or JavaToolchain()
        self.workspace_parent = workspace_parent

    # -----------------------------------------------------------------
    # Session
    # -----------------------------------------------------------------

    def _environment(self, sink: Optional[LineSink]) -> BuildEnvironment:
        return BuildEnvironment(
            err=sink,
            verbose=_flag(self.options, "verbose"),
            debug=_flag(self.options, "debug"),
            toolchain=self.toolchain,
            profile=self.profile,
        )

    @contextmanager
    def session(
        self,
        file: Optional[Path] = None,
        reader: Optional[Iterable[str]] = None,
    ) -> Iterator[SynthesisResult]:
        """
        Synthesize or locate the project for one build. The sink is flushed
        and the workspace removed when the block exits, however it exits.
        """
        sink = make_sink(self.error_writer)
        result: Optional[SynthesisResult] = None
        try:
            env = self._environment(sink)
            synthesizer = ProjectSynthesizer(
                env,
                providers=self.providers,
                profile=self.profile,
                workspace_parent=self.workspace_parent,
            )
            result = synthesizer.synthesize(file, reader)
            yield result
        finally:
            if sink is not None:
                sink.close()
            if result is not None:
                result.cleanup()

    def _print_or_raise(self, exc: Exception) -> None:
        if self.error_writer is None:
            if isinstance(exc, BuilderError):
                raise exc
            raise BuildFailure(str(exc)) from exc
        logger.error("Build failed: %s", exc)
        report_exception(exc, self.error_writer)

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def build(
        self,
        mode: BuildMode,
        file: Optional[Path] = None,
        reader: Optional[Iterable[str]] = None,
        output: Optional[Path] = None,
    ) -> BuildReceipt:
        """Build in *mode*; copy the archive to *output* if given."""
        receipt = BuildReceipt(mode=mode)
        t0 = time.monotonic()
        try:
            with self.session(file, reader) as result:
                project = result.project
                receipt.project = project.coordinate
                receipt.main_class = result.main_class or project.get_main_class()
                receipt.synthesized = result.synthesized
                if result.workspace is not None:
                    receipt.workspace = str(result.workspace.path)

                logger.info("Building %s (%s)", project.coordinate, mode.value)
                project.build(mode)

                if mode != BuildMode.COMPILE:
                    target = project.get_target()
                    receipt.artifact_path = str(target)
                    if output is not None:
                        if target.resolve() != output.resolve():
                            BuildEnvironment.copy_file(target, output)
                        receipt.output_path = str(output)
        except Exception as e:
            receipt.status = BuildStatus.FAILED
            receipt.error = str(e)
            self._print_or_raise(e)
        finally:
            receipt.finished_at = now_iso()
            receipt.duration_ms = int((time.monotonic() - t0) * 1000)
        return receipt

    def compile(self, file: Optional[Path] = None, reader: Optional[Iterable[str]] = None) -> BuildReceipt:
        return self.build(BuildMode.COMPILE, file=file, reader=reader)

    def package_to_archive(
        self,
        file: Optional[Path],
        include_sources: bool,
        output: Optional[Path],
        reader: Optional[Iterable[str]] = None,
    ) -> BuildReceipt:
        """
        Package the build product into a ``.jar`` file.

        Args:
            file: A ``.java`` or ``pom.xml`` file (or None, if *reader* is set).
            include_sources: Whether to add the sources to the archive.
            output: The ``.jar`` file to write to; None keeps the target.
            reader: Source text when *file* is None.
        """
        mode = BuildMode.PACKAGE_WITH_SOURCES if include_sources else BuildMode.PACKAGE
        return self.build(mode, file=file, reader=reader, output=output)

    def evaluate(
        self,
        source: Source,
        filename: Optional[str] = None,
        main_class: Optional[str] = None,
        run_collaborator: Optional[RunCollaborator] = None,
    ) -> Optional[RunResult]:
        """
        Build the source and run its main class.

        Returns None when a failure was reported to the error writer.
        """
        reader = io.StringIO(source) if isinstance(source, str) else source
        file = Path(filename) if filename else None
        try:
            with self.session(file, reader) as result:
                project = result.project
                project.build(BuildMode.COMPILE)
                if run_collaborator is None:
                    run_collaborator = JavaProcessRunner(self.toolchain, make_sink(self.error_writer))
                return ArtifactRunner(run_collaborator).run(project, main_class, result.main_class)
        except Exception as e:
            self._print_or_raise(e)
            return None
