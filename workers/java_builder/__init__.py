"""
java_builder — Single-source Java project synthesizer and build orchestrator

Turn a loose .java file (or raw Java source text) into a minimal Maven
project, build it with a local engine, and run or package the result.
No remote dependency resolution, no transitive dependency graph.

Profile: java-single-source-maven
"""

__version__ = "1.0.0"
BUILDER_NAME = "java_builder_v1"
BUILDER_VERSION = "v1"
PROFILE_ID = "java-single-source-maven"
