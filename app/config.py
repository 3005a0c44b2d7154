"""
Application configuration
"""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_TITLE: str = "Java Builder API"
    API_VERSION: str = "1.0.0"

    # Workers
    BUILDER_WORKSPACE: str | None = None  # None: system temp directory
    ARTIFACTS_PATH: str = "/files/artifacts"

    # Toolchain
    JAVAC: str = "javac"
    JAVA: str = "java"

    # Build Defaults
    DEFAULT_BUILD_TIMEOUT: int = 120  # seconds, per javac/java process
    BUILD_VERBOSE: bool = False
    BUILD_DEBUG: bool = False

    @property
    def workspace_parent(self) -> Path | None:
        return Path(self.BUILDER_WORKSPACE) if self.BUILDER_WORKSPACE else None

    @property
    def archive_dir(self) -> Path:
        """Where packaged .jar files are written"""
        return Path(self.ARTIFACTS_PATH) / "jars"

    @property
    def build_options(self) -> dict:
        """Named-option bag handed to the orchestrator"""
        return {"verbose": self.BUILD_VERBOSE, "debug": self.BUILD_DEBUG}

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
