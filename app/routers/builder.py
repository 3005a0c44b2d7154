"""
Builder Router — java_builder_v1

Compile, package, or run a single Java source submitted as text.
Each request builds in its own temporary workspace, which is gone by the
time the response is sent. Build output is returned as `diagnostics`.

No remote dependency resolution. No multi-module projects.
"""
import io
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from app.config import Settings
from java_builder import BUILDER_NAME, PROFILE_ID  # type: ignore
from java_builder.engine.toolchain import capture_toolchain  # type: ignore
from java_builder.io.schema import BuildReceipt, BuildStatus, RunResult  # type: ignore
from java_builder.orchestrator import BuildOrchestrator  # type: ignore

logger = logging.getLogger(__name__)


# =============================================================================
# Dependencies
# =============================================================================

def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


def make_orchestrator(settings: Settings, diagnostics: io.StringIO) -> BuildOrchestrator:
    """A fresh orchestrator per request; nothing is shared between builds."""
    toolchain = capture_toolchain(
        javac=settings.JAVAC,
        java=settings.JAVA,
        timeout=settings.DEFAULT_BUILD_TIMEOUT,
    )
    return BuildOrchestrator(
        error_writer=diagnostics,
        options=settings.build_options,
        toolchain=toolchain,
        workspace_parent=settings.workspace_parent,
    )


# =============================================================================
# Request / Response Models
# =============================================================================

class SourceRequest(BaseModel):
    """A single Java source unit."""
    source_code: str = Field(..., description="Java source text")


class PackageRequest(SourceRequest):
    include_sources: bool = Field(False, description="Add .java sources to the archive")


class EvaluateRequest(SourceRequest):
    main_class: Optional[str] = Field(
        None,
        description="Override the main class (default: the source's public class)",
    )


class BuildResponse(BaseModel):
    """Receipt plus captured build output."""
    receipt: BuildReceipt
    diagnostics: str = ""


class EvaluateResponse(BaseModel):
    status: BuildStatus
    result: Optional[RunResult] = None
    diagnostics: str = ""


# =============================================================================
# Router
# =============================================================================

router = APIRouter()


def _require_source(request: SourceRequest) -> None:
    if not request.source_code.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="source_code must not be empty",
        )


@router.get("/info")
def builder_info():
    """Builder identity and profile."""
    return {"builder": BUILDER_NAME, "profile": PROFILE_ID}


@router.post("/compile", response_model=BuildResponse)
def compile_source(request: SourceRequest, settings: Settings = Depends(get_settings)):
    """
    Compile a Java source unit in a throwaway project.

    The synthesized pom.xml declares the server's classpath as dependencies.
    """
    _require_source(request)
    diagnostics = io.StringIO()
    orchestrator = make_orchestrator(settings, diagnostics)
    receipt = orchestrator.compile(reader=io.StringIO(request.source_code))
    logger.info("compile: %s %s", receipt.project, receipt.status.value)
    return BuildResponse(receipt=receipt, diagnostics=diagnostics.getvalue())


@router.post("/package", response_model=BuildResponse)
def package_source(request: PackageRequest, settings: Settings = Depends(get_settings)):
    """
    Compile and package a Java source unit into an executable `.jar`.

    The archive is copied to `ARTIFACTS_PATH/jars/<job_id>.jar`.
    """
    _require_source(request)
    job_id = str(uuid.uuid4())
    output = settings.archive_dir / f"{job_id}.jar"

    diagnostics = io.StringIO()
    orchestrator = make_orchestrator(settings, diagnostics)
    receipt = orchestrator.package_to_archive(
        None,
        request.include_sources,
        output,
        reader=io.StringIO(request.source_code),
    )
    logger.info("package %s: %s %s", job_id, receipt.project, receipt.status.value)
    return BuildResponse(receipt=receipt, diagnostics=diagnostics.getvalue())


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate_source(request: EvaluateRequest, settings: Settings = Depends(get_settings)):
    """Compile a Java source unit and run its main class."""
    _require_source(request)
    diagnostics = io.StringIO()
    orchestrator = make_orchestrator(settings, diagnostics)
    result = orchestrator.evaluate(request.source_code, main_class=request.main_class)
    return EvaluateResponse(
        status=BuildStatus.SUCCESS if result is not None else BuildStatus.FAILED,
        result=result,
        diagnostics=diagnostics.getvalue(),
    )
