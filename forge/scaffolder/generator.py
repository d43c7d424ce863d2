"""Single-blueprint materialization.

Takes one ``Blueprint`` and the run's ``RunContext`` and produces the
project directory: the mandatory layout, ``pom.xml``, every generated file
the blueprint declares, and the ``README.md`` overview.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from forge.config import RunContext
from forge.scaffolder.models import Blueprint, DependencyDescriptor
from forge.scaffolder.templates import TemplateRenderer
from forge.scaffolder.writer import FileMaterializer
from forge.utils import RunLog


# ---------------------------------------------------------------------------
# Dependencies shared by every generated project
# ---------------------------------------------------------------------------

COMMON_DEPENDENCIES: tuple[DependencyDescriptor, ...] = (
    DependencyDescriptor(group_id="org.slf4j", artifact_id="slf4j-api", version="2.0.16"),
    DependencyDescriptor(
        group_id="ch.qos.logback", artifact_id="logback-classic", version="1.5.12"
    ),
    DependencyDescriptor(
        group_id="org.junit.jupiter",
        artifact_id="junit-jupiter",
        version="5.11.1",
        scope="test",
    ),
)

POM_TEMPLATE = "pom.xml.j2"
README_TEMPLATE = "README.md.j2"


@dataclass(frozen=True)
class RenderedFile:
    """Final content for one project-relative path."""

    path: str
    content: str
    license_header: bool = False


@dataclass
class BlueprintResult:
    """What one materialization wrote."""

    name: str
    root: Path
    files: list[Path] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class BlueprintGenerator:
    """Materializes blueprints below ``RunContext.base_dir``.

    Rendering happens up front (:meth:`plan`), so a broken template fails
    before anything of that blueprint reaches the disk.
    """

    def __init__(
        self,
        context: RunContext,
        run_log: RunLog,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.context = context
        self.log = run_log
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    def project_root(self, blueprint: Blueprint) -> Path:
        return self.context.base_dir / blueprint.name

    def params(self, blueprint: Blueprint) -> dict[str, Any]:
        """Template parameters: global run values plus the blueprint's own."""
        return {
            **self.context.parameters(),
            **blueprint.context(),
            "common_dependencies": [d.model_dump() for d in COMMON_DEPENDENCIES],
        }

    def plan(self, blueprint: Blueprint) -> list[RenderedFile]:
        """Render every file of *blueprint* without touching the disk."""
        params = self.params(blueprint)
        rendered = [
            RenderedFile("pom.xml", self.renderer.render(POM_TEMPLATE, params)),
        ]
        for spec in blueprint.files:
            path = self.renderer.render_string(spec.path, params)
            if spec.template_name is not None:
                content = self.renderer.render(spec.template_name, params)
            else:
                content = self.renderer.render_string(spec.template, params)
            rendered.append(RenderedFile(path, content, spec.license_header))
        rendered.append(
            RenderedFile("README.md", self.renderer.render(README_TEMPLATE, params))
        )
        return rendered

    def generate(self, blueprint: Blueprint) -> BlueprintResult:
        """Materialize *blueprint* and return the written paths.

        Raises:
            FilesystemWriteFailure: A directory or file could not be written.
            jinja2.TemplateError: A template references an unknown parameter.
        """
        root = self.project_root(blueprint)
        files = self.plan(blueprint)

        writer = FileMaterializer(root)
        writer.ensure_dirs(*blueprint.directories)
        self.log.info(f"Directory structure created for {root}.")

        for item in files:
            target = writer.write(
                item.path, item.content, license_header=item.license_header
            )
            if item.path == "pom.xml":
                self.log.info(f"pom.xml created for {blueprint.artifact_id}.")
            elif item.path == "README.md":
                self.log.info(f"README.md created for {blueprint.name}.")
            else:
                self.log.info(f"{target.name} created.")

        self.log.info(f"{blueprint.name} scaffolded successfully.")
        return BlueprintResult(name=blueprint.name, root=root, files=list(writer.written))
