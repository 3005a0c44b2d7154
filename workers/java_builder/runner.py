"""
java_builder runner — public entry points and command-line interface.

Ties synthesis, the build engine and the artifact runner together into
three functions that can be called from the API, from a CLI, or
programmatically:

    evaluate(source, filename=None)       build and run a main class
    compile_source(file, error_writer)    compile only
    package_to_archive(file, include_sources, output, error_writer)
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence, Union

from java_builder.core.artifact_runner import RunCollaborator
from java_builder.core.dependency_inferrer import ClasspathProvider
from java_builder.engine.toolchain import capture_toolchain
from java_builder.io.diagnostics import Writer
from java_builder.io.schema import BuildReceipt, BuildStatus, RunResult
from java_builder.orchestrator import BuildOrchestrator

logger = logging.getLogger(__name__)


# ── Public API ───────────────────────────────────────────────────────────────

def evaluate(
    source: Union[str, Iterable[str]],
    filename: Optional[str] = None,
    error_writer: Optional[Writer] = None,
    options: Optional[Mapping[str, object]] = None,
    main_class: Optional[str] = None,
    providers: Optional[Sequence[ClasspathProvider]] = None,
    run_collaborator: Optional[RunCollaborator] = None,
) -> Optional[RunResult]:
    """
    Build *source* (or the project *filename* belongs to) and run its main
    class.

    Returns
    -------
    RunResult, or None if a failure was written to *error_writer*.
    """
    orchestrator = BuildOrchestrator(error_writer=error_writer, options=options, providers=providers)
    return orchestrator.evaluate(source, filename, main_class, run_collaborator)


def compile_source(
    file: Path,
    error_writer: Optional[Writer] = None,
    options: Optional[Mapping[str, object]] = None,
    providers: Optional[Sequence[ClasspathProvider]] = None,
) -> BuildReceipt:
    """Compile a ``.java`` file or a ``pom.xml`` project."""
    orchestrator = BuildOrchestrator(error_writer=error_writer, options=options, providers=providers)
    return orchestrator.compile(file)


def package_to_archive(
    file: Path,
    include_sources: bool,
    output: Optional[Path],
    error_writer: Optional[Writer] = None,
    options: Optional[Mapping[str, object]] = None,
    providers: Optional[Sequence[ClasspathProvider]] = None,
) -> BuildReceipt:
    """Build *file* and package the product into a ``.jar`` at *output*."""
    orchestrator = BuildOrchestrator(error_writer=error_writer, options=options, providers=providers)
    return orchestrator.package_to_archive(file, include_sources, output)


# ── CLI ──────────────────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="java_builder — build, package, or run a single Java source file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show build progress")
    parser.add_argument("--debug", action="store_true", help="Compile with debug info, log commands")
    parser.add_argument(
        "--workspace",
        type=Path,
        default=os.getenv("BUILDER_WORKSPACE") or None,
        help="Parent directory for temporary workspaces",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_compile = sub.add_parser("compile", help="Compile a .java file or pom.xml")
    p_compile.add_argument("file", type=Path)

    p_package = sub.add_parser("package", help="Build and package into a .jar")
    p_package.add_argument("file", type=Path)
    p_package.add_argument("-o", "--output", type=Path, default=None, help="Archive to write")
    p_package.add_argument("--sources", action="store_true", help="Include sources in the archive")

    p_eval = sub.add_parser("eval", help="Build and run; reads stdin when no file is given")
    p_eval.add_argument("file", type=Path, nargs="?", default=None)
    p_eval.add_argument("--main-class", default=None)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for java_builder."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    toolchain = capture_toolchain(
        javac=os.getenv("JAVAC", "javac"),
        java=os.getenv("JAVA", "java"),
        timeout=int(os.getenv("DEFAULT_BUILD_TIMEOUT", "120")),
    )
    logger.info("Using %s / %s", toolchain.javac_version, toolchain.java_version)

    orchestrator = BuildOrchestrator(
        error_writer=sys.stderr,
        options={"verbose": args.verbose, "debug": args.debug},
        toolchain=toolchain,
        workspace_parent=args.workspace,
    )

    if args.command == "eval":
        if args.file is not None and args.file.exists():
            result = orchestrator.evaluate([], str(args.file), args.main_class)
        else:
            result = orchestrator.evaluate(sys.stdin.read(), None, args.main_class)
        if result is None:
            return 1
        sys.stdout.write(result.stdout)
        return result.exit_code

    if not args.file.exists():
        logger.error("File not found: %s", args.file)
        return 1

    if args.command == "compile":
        receipt = orchestrator.compile(args.file)
    else:
        receipt = orchestrator.package_to_archive(args.file, args.sources, args.output)

    print(receipt.model_dump_json(indent=2))
    return 0 if receipt.status == BuildStatus.SUCCESS else 1


if __name__ == "__main__":
    sys.exit(main())
