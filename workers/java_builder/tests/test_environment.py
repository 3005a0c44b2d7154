"""Tests for BuildEnvironment resolution and diagnostics routing."""
import io
from pathlib import Path

import pytest

from java_builder.engine.environment import BuildEnvironment
from java_builder.errors import BuildFailure, DescriptorParseError
from java_builder.io.diagnostics import LineSink
from java_builder.io.schema import Coordinate

from .conftest import write_jar


class TestResolve:

    def test_synthetic_registration_first(self, env: BuildEnvironment, tmp_path: Path):
        coord = Coordinate(group_id="net.imagej", artifact_id="lib", version="1.0.0")
        env.register_synthetic_descriptor(tmp_path / "lib.jar", coord)
        assert env.resolve(coord) == tmp_path / "lib.jar"
        assert env.contains_project("net.imagej", "lib")

    def test_parsed_project_classes(self, env: BuildEnvironment, maven_project: Path):
        project = env.parse(maven_project / "pom.xml")
        assert env.resolve(project.coordinate) == project.classes_directory

    def test_local_repository(self, env: BuildEnvironment):
        coord = Coordinate(group_id="org.example", artifact_id="thing", version="2.0")
        jar = write_jar(env.local_repository / "org" / "example" / "thing" / "2.0" / "thing-2.0.jar")
        assert env.resolve(coord) == jar

    def test_unresolvable(self, env: BuildEnvironment):
        with pytest.raises(BuildFailure):
            env.resolve(Coordinate(group_id="x", artifact_id="y", version="1"))

    def test_unreadable_descriptor(self, env: BuildEnvironment, tmp_path: Path):
        with pytest.raises(DescriptorParseError):
            env.parse(tmp_path / "missing" / "pom.xml")


class TestDiagnostics:

    def test_log_only_when_verbose(self, tmp_path: Path):
        out = io.StringIO()
        quiet = BuildEnvironment(err=LineSink(out), local_repository=tmp_path)
        quiet.log("hidden")
        loud = BuildEnvironment(err=LineSink(out), verbose=True, local_repository=tmp_path)
        loud.log("shown")
        assert out.getvalue() == "[INFO] shown\n"

    def test_emit_without_sink_goes_to_log(self, env: BuildEnvironment, caplog):
        with caplog.at_level("INFO", logger="java_builder.engine.environment"):
            env.emit("Foo.java:1: error\n1 error\n")
        assert [r.getMessage() for r in caplog.records] == ["Foo.java:1: error", "1 error"]
