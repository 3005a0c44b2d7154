"""
Schema — Pydantic models for java_builder descriptors and receipts.

Two families:
  1. Project description: Coordinate, ProjectDescriptor.
  2. Call outcomes: BuildReceipt (one per orchestration call) and
     RunResult (one per evaluated main class).
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from java_builder import BUILDER_NAME, BUILDER_VERSION, PROFILE_ID


# =============================================================================
# Enums
# =============================================================================

class BuildMode(str, Enum):
    """What the build engine is asked to produce."""
    COMPILE = "compile"
    PACKAGE = "package"
    PACKAGE_WITH_SOURCES = "package-with-sources"


class BuildStatus(str, Enum):
    """Outcome of one orchestration call."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# =============================================================================
# Project description
# =============================================================================

class Coordinate(BaseModel):
    """A (groupId, artifactId, version) triple identifying a project or dependency."""
    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version: str
    scope: Optional[str] = None  # only ever set when parsed from a real pom.xml

    @property
    def key(self) -> tuple:
        return (self.group_id, self.artifact_id)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


class ProjectDescriptor(BaseModel):
    """Everything the build engine needs to know about one project."""
    coordinate: Coordinate
    main_class: Optional[str] = None
    dependencies: List[Coordinate] = Field(default_factory=list)
    source_root: str = "src/main/java"


# =============================================================================
# Call outcomes
# =============================================================================

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class BuildReceipt(BaseModel):
    """Record of one compile/package call."""
    builder: str = BUILDER_NAME
    builder_version: str = BUILDER_VERSION
    profile_id: str = PROFILE_ID

    mode: BuildMode
    status: BuildStatus = BuildStatus.SUCCESS
    project: Optional[Coordinate] = None
    main_class: Optional[str] = None
    synthesized: bool = False
    workspace: Optional[str] = None  # deleted by the time the receipt is returned
    artifact_path: Optional[str] = None
    output_path: Optional[str] = None
    error: Optional[str] = None

    started_at: str = Field(default_factory=now_iso)
    finished_at: Optional[str] = None
    duration_ms: int = 0


class RunResult(BaseModel):
    """Outcome of handing a built main class to the run collaborator."""
    main_class: str
    classpath: List[str] = Field(default_factory=list)
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
