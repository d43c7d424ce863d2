"""Forge configuration.

Centralised, typed configuration for a scaffolding run. All settings use
Pydantic v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REQUIRED_TOOLS: list[str] = ["java", "mvn", "git", "sed"]


class Config(BaseModel):
    """Global Forge configuration.

    Holds every tuneable parameter and derived path used by the pipeline.
    Instances are typically created once by the CLI entry point and then
    handed to ``Pipeline``.
    """

    base_dir: Path = Field(
        default=Path("./forensic_toolkits"),
        description="Directory under which every blueprint is materialized",
    )
    log_file: Path = Field(default=Path("scaffold.log"))
    java_version: str = Field(default="17", min_length=1)
    build_tool_version: str = Field(default="3.9.9", min_length=1)
    required_tools: list[str] = Field(default_factory=lambda: list(DEFAULT_REQUIRED_TOOLS))
    build_tool: str = Field(default="mvn")
    runtime_tool: str = Field(default="java")
    probe_timeout: int = Field(default=30, ge=1, description="Per-probe timeout in seconds")

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def resolved_base_dir(self) -> Path:
        """Absolute base directory."""
        return self.base_dir.expanduser().resolve()

    def project_dir(self, name: str) -> Path:
        """Target directory of the blueprint called *name*."""
        return self.resolved_base_dir / name

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            FORGE_BASE_DIR, FORGE_LOG_FILE, FORGE_JAVA_VERSION,
            FORGE_BUILD_TOOL_VERSION, FORGE_PROBE_TIMEOUT,
            FORGE_REQUIRED_TOOLS (comma-separated).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("FORGE_BASE_DIR"):
            kwargs["base_dir"] = Path(os.environ["FORGE_BASE_DIR"])
        if os.environ.get("FORGE_LOG_FILE"):
            kwargs["log_file"] = Path(os.environ["FORGE_LOG_FILE"])
        if os.environ.get("FORGE_JAVA_VERSION"):
            kwargs["java_version"] = os.environ["FORGE_JAVA_VERSION"]
        if os.environ.get("FORGE_BUILD_TOOL_VERSION"):
            kwargs["build_tool_version"] = os.environ["FORGE_BUILD_TOOL_VERSION"]
        if os.environ.get("FORGE_PROBE_TIMEOUT"):
            kwargs["probe_timeout"] = int(os.environ["FORGE_PROBE_TIMEOUT"])
        if os.environ.get("FORGE_REQUIRED_TOOLS"):
            tools = os.environ["FORGE_REQUIRED_TOOLS"].split(",")
            kwargs["required_tools"] = [t.strip() for t in tools if t.strip()]
        return cls(**kwargs)


class RunContext(BaseModel):
    """Resolved, read-only configuration shared by every step of one run.

    Created by ``EnvironmentValidator.validate`` and never mutated; the
    pipeline discards it when the process exits.
    """

    model_config = ConfigDict(frozen=True)

    java_version: str
    build_tool_version: str
    sed_command: str = "sed"
    base_dir: Path
    platform: str = ""
    java_version_detected: str | None = None

    def parameters(self) -> dict[str, str]:
        """Global template parameters available to every rendered file."""
        return {
            "java_version": self.java_version,
            "build_tool_version": self.build_tool_version,
        }
