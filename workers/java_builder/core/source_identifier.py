"""
Source identifier — derive the fully-qualified primary type of a .java unit.

Scans logical lines, skipping blank lines, ``//`` comments and ``/* */``
blocks (including blocks spanning several lines), and matches:
  1. ``package a.b.c;``      → package
  2. ``public class Foo``    → simple name, ends the scan

Without a public type declaration the simple name falls back to the file's
base name. The package statement must be the first statement in the file,
so the scan never needs to look past the first public type.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from java_builder.errors import MalformedSourceError

SOURCE_SUFFIX = ".java"

PACKAGE_PATTERN = re.compile(r"package ([a-zA-Z0-9_.]*).*")
TYPE_PATTERN = re.compile(
    r".*?public (?:(?:abstract|final|sealed|strictfp) )*"
    r"(?:class|interface|enum|record) ([a-zA-Z0-9_]*).*"
)


@dataclass(frozen=True)
class TypeIdentity:
    """Package plus simple name of the primary type of a source unit."""
    package: str
    simple_name: str

    @property
    def fully_qualified_name(self) -> str:
        if self.package:
            return f"{self.package}.{self.simple_name}"
        return self.simple_name

    @property
    def source_path(self) -> str:
        """Project-relative path under the source root, e.g. ``a/b/Foo.java``."""
        return self.fully_qualified_name.replace(".", "/") + SOURCE_SUFFIX

    def __str__(self) -> str:
        return self.fully_qualified_name


def _skip_block_comments(line: str, lines: Iterator[str]) -> Optional[str]:
    """
    Drop leading ``/* ... */`` blocks from *line*, pulling continuation
    lines from *lines* as needed. Returns the trimmed remainder, or None if
    the stream ended inside a comment.
    """
    while line.startswith("/*"):
        end = line.find("*/", 2)
        while end < 0:
            line = next(lines, None)
            if line is None:
                return None
            end = line.find("*/")
        line = line[end + 2:].strip()
    return line


def identify_source(source_lines: Iterable[str], file_name: str) -> TypeIdentity:
    """
    Identify the primary type declared by *source_lines*.

    Parameters
    ----------
    source_lines : Iterable[str]
        Lines of Java source (trailing newlines are ignored).
    file_name : str
        Name of the file the lines came from; supplies the fallback
        simple name.

    Raises
    ------
    MalformedSourceError
        *file_name* does not end in ``.java``, or no simple name can be
        determined at all.
    """
    if not file_name.endswith(SOURCE_SUFFIX):
        raise MalformedSourceError(f"Not a Java source file: {file_name}")
    name = Path(file_name).name[: -len(SOURCE_SUFFIX)]
    package = ""

    lines = iter(source_lines)
    for raw in lines:
        line = _skip_block_comments(raw.strip(), lines)
        if line is None:
            break
        if not line or line.startswith("//"):
            continue

        package_match = PACKAGE_PATTERN.fullmatch(line)
        if package_match:
            package = package_match.group(1)

        type_match = TYPE_PATTERN.fullmatch(line)
        if type_match:
            name = type_match.group(1)
            break

    if not name:
        raise MalformedSourceError(
            f"No public type declaration in {file_name!r} and no file name to fall back on"
        )
    return TypeIdentity(package=package, simple_name=name)


def identify_file(path: Path) -> TypeIdentity:
    """Identify the primary type of the .java file at *path*."""
    if not path.name.endswith(SOURCE_SUFFIX):
        raise MalformedSourceError(f"Not a Java source file: {path}")
    with open(path, encoding="utf-8") as f:
        return identify_source(f, path.name)
