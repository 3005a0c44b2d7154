"""Tests for ProjectSynthesizer: located, parsed and synthesized projects."""
import io
from pathlib import Path

import pytest

from java_builder.core.synthesizer import ProjectSynthesizer
from java_builder.engine.environment import BuildEnvironment
from java_builder.errors import MalformedSourceError, PathMismatchError
from java_builder.io.pom import parse_pom

from .conftest import HELLO_JAVA, NO_TYPE_JAVA, PACKAGED_JAVA


@pytest.fixture
def synthesizer(env: BuildEnvironment, workspace_parent: Path) -> ProjectSynthesizer:
    return ProjectSynthesizer(env, providers=[], workspace_parent=workspace_parent)


class TestTemporaryProject:

    def test_layout_from_source_text(self, synthesizer: ProjectSynthesizer):
        result = synthesizer.synthesize(reader=io.StringIO(HELLO_JAVA))
        try:
            root = result.workspace.path
            source = root / "src" / "main" / "java" / "Hello.java"
            assert source.read_text(encoding="utf-8").rstrip("\n") == HELLO_JAVA
            assert not (root / ".java").exists()

            descriptor = parse_pom((root / "pom.xml").read_bytes())
            assert descriptor.coordinate.artifact_id == "Hello"
            assert descriptor.coordinate.group_id == "net.imagej"
            assert descriptor.coordinate.version == "1.0.0-SNAPSHOT"
            assert descriptor.main_class == "Hello"

            assert result.synthesized
            assert result.main_class == "Hello"
            assert result.project.get_directory() == root
        finally:
            result.cleanup()
        assert not root.exists()

    def test_packaged_source_goes_into_package_dirs(self, synthesizer: ProjectSynthesizer):
        result = synthesizer.synthesize(reader=io.StringIO(PACKAGED_JAVA))
        try:
            source = result.workspace.path / "src/main/java/a/b/c/Foo.java"
            assert source.is_file()
            assert result.project.get_main_class() == "a.b.c.Foo"
            assert result.project.coordinate.artifact_id == "Foo"
        finally:
            result.cleanup()

    def test_inferred_dependencies_in_descriptor(
        self, env: BuildEnvironment, workspace_parent: Path, tmp_path: Path,
    ):
        from java_builder.core.dependency_inferrer import ClasspathProvider

        lib = tmp_path / "classes"
        lib.mkdir()
        synthesizer = ProjectSynthesizer(
            env,
            providers=[ClasspathProvider.from_paths("host", [lib])],
            workspace_parent=workspace_parent,
        )
        result = synthesizer.synthesize(reader=io.StringIO(HELLO_JAVA))
        try:
            deps = result.project.descriptor.dependencies
            assert [d.artifact_id for d in deps] == ["classes"]
            assert env.resolve(deps[0]) == lib
        finally:
            result.cleanup()

    def test_failed_identification_removes_workspace(
        self, synthesizer: ProjectSynthesizer, workspace_parent: Path,
    ):
        with pytest.raises(MalformedSourceError):
            synthesizer.synthesize(reader=io.StringIO(NO_TYPE_JAVA))
        assert list(workspace_parent.iterdir()) == []

    def test_no_file_and_no_reader(self, synthesizer: ProjectSynthesizer, tmp_path: Path):
        with pytest.raises(MalformedSourceError):
            synthesizer.synthesize(file=tmp_path / "Missing.java")

    def test_missing_file_falls_back_to_reader(self, synthesizer: ProjectSynthesizer, tmp_path: Path):
        result = synthesizer.synthesize(file=tmp_path / "Missing.java", reader=io.StringIO(HELLO_JAVA))
        try:
            assert result.synthesized
            assert result.main_class == "Hello"
        finally:
            result.cleanup()

    def test_file_name_hint_names_untyped_source(self, synthesizer: ProjectSynthesizer, tmp_path: Path):
        result = synthesizer.synthesize(file=tmp_path / "Foo.java", reader=io.StringIO(NO_TYPE_JAVA))
        try:
            assert result.main_class == "Foo"
            source = result.workspace.path / "src/main/java/Foo.java"
            assert source.read_text(encoding="utf-8") == NO_TYPE_JAVA
            assert parse_pom((result.workspace.path / "pom.xml").read_bytes()).main_class == "Foo"
        finally:
            result.cleanup()

    def test_non_java_hint_is_ignored(self, synthesizer: ProjectSynthesizer, tmp_path: Path):
        result = synthesizer.synthesize(file=tmp_path / "notes.txt", reader=io.StringIO(HELLO_JAVA))
        try:
            assert result.main_class == "Hello"
        finally:
            result.cleanup()


class TestExistingFiles:

    def test_pom_is_parsed_directly(self, synthesizer: ProjectSynthesizer, maven_project: Path):
        result = synthesizer.synthesize(file=maven_project / "pom.xml")
        assert not result.synthesized
        assert result.main_class is None
        assert result.project.coordinate.artifact_id == "real-project"
        assert result.project.get_directory() == maven_project

    def test_source_in_real_project_reuses_pom(
        self, synthesizer: ProjectSynthesizer, maven_project: Path, workspace_parent: Path,
    ):
        source = maven_project / "src/main/java/a/b/Foo.java"
        result = synthesizer.synthesize(file=source)

        assert not result.synthesized
        assert result.main_class == "a.b.Foo"
        assert result.project.coordinate.artifact_id == "real-project"
        assert list(workspace_parent.iterdir()) == []

    def test_misplaced_source_writes_nothing(
        self, synthesizer: ProjectSynthesizer, tmp_path: Path, workspace_parent: Path,
    ):
        source = tmp_path / "wrong" / "Foo.java"
        source.parent.mkdir()
        source.write_text(PACKAGED_JAVA)

        with pytest.raises(PathMismatchError):
            synthesizer.synthesize(file=source)
        assert list(workspace_parent.iterdir()) == []
        assert sorted(p.name for p in source.parent.iterdir()) == ["Foo.java"]

    def test_loose_file_is_synthesized(self, synthesizer: ProjectSynthesizer, tmp_path: Path):
        source = tmp_path / "loose" / "Hello.java"
        source.parent.mkdir()
        source.write_text(HELLO_JAVA)

        result = synthesizer.synthesize(file=source)
        try:
            assert result.synthesized
            assert result.main_class == "Hello"
            assert (result.workspace.path / "src/main/java/Hello.java").is_file()
        finally:
            result.cleanup()
        assert source.is_file()

    def test_project_layout_without_pom_is_synthesized(self, synthesizer: ProjectSynthesizer, tmp_path: Path):
        source = tmp_path / "nopom" / "src/main/java/a/b/c/Foo.java"
        source.parent.mkdir(parents=True)
        source.write_text(PACKAGED_JAVA)

        result = synthesizer.synthesize(file=source)
        try:
            assert result.synthesized
            assert result.main_class == "a.b.c.Foo"
        finally:
            result.cleanup()
        assert not (tmp_path / "nopom" / "pom.xml").exists()

    def test_mismatch_inside_source_root(
        self, synthesizer: ProjectSynthesizer, maven_project: Path, workspace_parent: Path,
    ):
        source = maven_project / "src/main/java/a/b/Foo.java"
        source.write_text("package x.y;\n\npublic class Foo {\n}\n")
        before = sorted(p.relative_to(maven_project) for p in maven_project.rglob("*"))

        with pytest.raises(PathMismatchError):
            synthesizer.synthesize(file=source)

        assert sorted(p.relative_to(maven_project) for p in maven_project.rglob("*")) == before
        assert list(workspace_parent.iterdir()) == []

    def test_loose_file_without_public_type_uses_file_name(
        self, synthesizer: ProjectSynthesizer, tmp_path: Path,
    ):
        source = tmp_path / "loose" / "Foo.java"
        source.parent.mkdir()
        source.write_text(NO_TYPE_JAVA)

        result = synthesizer.synthesize(file=source)
        try:
            assert result.synthesized
            assert result.main_class == "Foo"
            assert result.project.coordinate.artifact_id == "Foo"
            assert (result.workspace.path / "src/main/java/Foo.java").is_file()
        finally:
            result.cleanup()
