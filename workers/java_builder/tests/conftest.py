"""
Test fixtures for java_builder.

Java source samples, an isolated BuildEnvironment, a real-looking Maven
project layout, and helpers for fake classpath archives.

Tests that actually run javac/java are skipped when no JDK is on PATH.
"""
from __future__ import annotations

import shutil
import textwrap
import zipfile
from pathlib import Path
from typing import List

import pytest

from java_builder.engine.environment import BuildEnvironment
from java_builder.engine.toolchain import JavaToolchain


# ── Java source samples ─────────────────────────────────────────────────────

HELLO_JAVA = "public class Hello { public static void main(String[] a){} }"

PACKAGED_JAVA = textwrap.dedent("""\
    /*
     * Licensed under the same terms as the rest of the project.
     */


    package a.b.c;

    import java.util.List;

    public class Foo {
        public static void main(String[] args) {
            System.out.println("foo");
        }
    }
""")

INLINE_COMMENT_JAVA = textwrap.dedent("""\
    /* header */ /* second header
       spanning lines */ package org.example.util;
    // helper
    public final class Strings {
    }
""")

NO_TYPE_JAVA = textwrap.dedent("""\
    // nothing public in here
    class Hidden {
        int x;
    }
""")

UNTERMINATED_COMMENT_JAVA = textwrap.dedent("""\
    /* this comment
       never ends
""")

PRINTING_JAVA = textwrap.dedent("""\
    package demo;

    public class Greeter {
        public static void main(String[] args) {
            System.out.println("hello from greeter");
        }
    }
""")

BROKEN_JAVA = textwrap.dedent("""\
    public class Broken {
        public static void main(String[] args) {
            int x = ;
        }
    }
""")

EXISTING_POM = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <project xmlns="http://maven.apache.org/POM/4.0.0">
        <modelVersion>4.0.0</modelVersion>
        <parent>
            <groupId>org.example</groupId>
            <artifactId>parent</artifactId>
            <version>2.1.0</version>
        </parent>
        <artifactId>real-project</artifactId>
        <build>
            <plugins>
                <plugin>
                    <artifactId>maven-jar-plugin</artifactId>
                    <configuration>
                        <archive>
                            <manifest>
                                <mainClass>a.b.Foo</mainClass>
                            </manifest>
                        </archive>
                    </configuration>
                </plugin>
            </plugins>
        </build>
        <dependencies>
            <dependency>
                <groupId>junit</groupId>
                <artifactId>junit</artifactId>
                <version>4.13.2</version>
                <scope>test</scope>
            </dependency>
        </dependencies>
    </project>
""")


requires_jdk = pytest.mark.skipif(
    shutil.which("javac") is None or shutil.which("java") is None,
    reason="javac/java not available on PATH",
)


# ── Helpers ─────────────────────────────────────────────────────────────────

def write_jar(path: Path, manifest: str | None = None) -> Path:
    """Write a minimal zip archive, optionally with a manifest."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as jar:
        if manifest is not None:
            jar.writestr("META-INF/MANIFEST.MF", manifest)
        jar.writestr("placeholder.txt", "x")
    return path


def booster_manifest(class_path: List[str]) -> str:
    return (
        "Manifest-Version: 1.0\r\n"
        f"Class-Path: {' '.join(class_path)}\r\n"
        "Main-Class: org.apache.maven.surefire.booter.ForkedBooter\r\n"
        "\r\n"
    )


# ── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def env(tmp_path: Path) -> BuildEnvironment:
    """Quiet environment with an empty local repository."""
    return BuildEnvironment(local_repository=tmp_path / "m2")


@pytest.fixture
def missing_toolchain() -> JavaToolchain:
    """Toolchain whose binaries cannot be launched."""
    return JavaToolchain(javac="javac-does-not-exist", java="java-does-not-exist", timeout=5)


@pytest.fixture
def maven_project(tmp_path: Path) -> Path:
    """A real project: pom.xml + src/main/java/a/b/Foo.java."""
    root = tmp_path / "real"
    source = root / "src" / "main" / "java" / "a" / "b" / "Foo.java"
    source.parent.mkdir(parents=True)
    source.write_text("package a.b;\n\npublic class Foo {\n}\n")
    (root / "pom.xml").write_text(EXISTING_POM)
    return root


@pytest.fixture
def workspace_parent(tmp_path: Path) -> Path:
    parent = tmp_path / "workspaces"
    parent.mkdir()
    return parent
