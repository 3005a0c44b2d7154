"""
Error taxonomy for java_builder.

Synthesis-time errors (source identity, path layout, workspace) abort before
any build is attempted. Build-time errors are caught by the orchestrator and
either written to the caller's diagnostics sink or re-raised.
"""


class BuilderError(Exception):
    """Base class for every error raised by java_builder."""


class MalformedSourceError(BuilderError):
    """The input does not look like a single compilable .java source unit."""


class PathMismatchError(BuilderError):
    """A source file's location contradicts its declared package/class."""


class WorkspaceCreationError(BuilderError):
    """Creating or populating a temporary workspace failed."""


class NoMainClassError(BuilderError):
    """No runnable entry point could be determined."""


class DescriptorParseError(BuilderError):
    """A pom.xml could not be parsed into a project descriptor."""


class SerializationError(BuilderError):
    """A project descriptor could not be written as pom.xml."""


class BuildFailure(BuilderError):
    """The build engine failed (compilation error, missing dependency, ...)."""
