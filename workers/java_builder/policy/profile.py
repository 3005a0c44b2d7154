"""
Profile descriptor for java_builder.

Frozen dataclass holding every fixed constant of the synthesis pipeline:
default coordinates, layout conventions, and the booster-archive pattern.
Not user-selectable in v1; use ``BuildProfile.v1()``.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BuildProfile:
    """java_builder v1 build profile."""

    profile_id: str
    default_group_id: str = "net.imagej"
    default_version: str = "1.0.0-SNAPSHOT"
    dependency_version: str = "1.0.0"
    placeholder_artifact_id: str = "dependency"
    source_suffix: str = ".java"
    source_root: str = "src/main/java/"
    resource_root: str = "src/main/resources/"
    descriptor_filename: str = "pom.xml"
    packaging_plugin: str = "maven-jar-plugin"
    booster_pattern: str = r".*/target/surefire/surefirebooter[0-9]*\.jar"
    indent: str = "    "

    @classmethod
    def v1(cls) -> BuildProfile:
        """The single supported profile for java_builder v1."""
        return cls(profile_id="java-single-source-maven")
