"""Blueprint data models.

A blueprint is pure data: where the project goes, which dependency
coordinates its manifest lists, which files it contains, and the prose used
for its overview document.  The engine never interprets dependency
coordinates or file contents.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PACKAGE = "com.devinbroyal.forensics"

# Mandatory directory layout of every blueprint, relative to its root.
PROJECT_DIRS: tuple[str, ...] = (
    "src/main/java/{package_path}",
    "src/main/resources",
    "src/test/java/{package_path}",
    "config",
    "docs",
    "tests",
)


class DependencyDescriptor(BaseModel):
    """Opaque Maven coordinates."""

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    scope: str | None = None

    @property
    def coordinates(self) -> str:
        """``group:artifact:version`` form used in documentation."""
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


class GeneratedFile(BaseModel):
    """One file of a blueprint: target path plus its template."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path relative to the project root")
    template: str | None = Field(default=None, description="Inline template text")
    template_name: str | None = Field(
        default=None, description="Name of a packaged .j2 template"
    )
    license_header: bool = False

    @field_validator("path")
    @classmethod
    def _relative_path(cls, value: str) -> str:
        rel = PurePosixPath(value)
        if not value or rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"file path must be relative to the project root: {value!r}")
        return value

    @model_validator(mode="after")
    def _one_template(self) -> "GeneratedFile":
        if (self.template is None) == (self.template_name is None):
            raise ValueError(
                f"{self.path}: exactly one of 'template' or 'template_name' is required"
            )
        return self


class Blueprint(BaseModel):
    """Declarative definition of one generated project."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
    artifact_id: str = Field(..., min_length=1)
    package: str = Field(default=DEFAULT_PACKAGE, pattern=r"^[a-z_][a-z0-9_]*(\.[a-z_][a-z0-9_]*)*$")
    dependencies: tuple[DependencyDescriptor, ...] = ()
    files: tuple[GeneratedFile, ...] = ()
    purpose: str = ""
    features: tuple[str, ...] = ()
    tech_stack: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _unique_file_paths(self) -> "Blueprint":
        seen: set[str] = set()
        for spec in self.files:
            if spec.path in seen:
                raise ValueError(f"{self.name}: duplicate generated file {spec.path}")
            seen.add(spec.path)
        return self

    @property
    def package_path(self) -> str:
        """The Java package as a directory path."""
        return self.package.replace(".", "/")

    @property
    def directories(self) -> list[str]:
        """Directory layout with the package path filled in."""
        return [d.format(package_path=self.package_path) for d in PROJECT_DIRS]

    def context(self) -> dict[str, Any]:
        """Blueprint-level template parameters."""
        return {
            "name": self.name,
            "artifact_id": self.artifact_id,
            "package": self.package,
            "package_path": self.package_path,
            "purpose": self.purpose,
            "features": list(self.features),
            "tech_stack": list(self.tech_stack),
            "dependencies": [d.model_dump() for d in self.dependencies],
            "dependency_coordinates": [d.coordinates for d in self.dependencies],
        }
