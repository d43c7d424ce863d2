"""Jinja2 template rendering for blueprint files.

Provides the TemplateRenderer class which loads the shared ``.j2`` templates
from ``forge/scaffolder/templates/`` and renders both those and the inline
templates declared in blueprint manifests.  Rendering is a pure function of
the template and its parameters; writing the result is the materializer's job.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for blueprint scaffolding.

    Placeholders are flat ``{{ name }}`` substitutions.  Undefined names raise
    ``jinja2.UndefinedError`` instead of rendering as empty text, so a
    misspelt parameter in a manifest fails the first time it is rendered.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    # -- Single template rendering -----------------------------------------

    def render(self, template_name: str, params: Mapping[str, Any]) -> str:
        """Render a packaged template with the provided parameters.

        Args:
            template_name: Path relative to the template directory (e.g.
                ``"pom.xml.j2"``).
            params: Variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_name)
        return template.render(**params)

    def render_string(self, template_string: str, params: Mapping[str, Any]) -> str:
        """Render an inline template string with the provided parameters."""
        template = self.env.from_string(template_string)
        return template.render(**params)

    def render_bytes(
        self,
        params: Mapping[str, Any],
        *,
        template_name: str | None = None,
        template_string: str | None = None,
    ) -> bytes:
        """Render either a packaged or an inline template to UTF-8 bytes."""
        if (template_name is None) == (template_string is None):
            raise ValueError("Pass exactly one of template_name or template_string")
        if template_name is not None:
            text = self.render(template_name, params)
        else:
            text = self.render_string(template_string, params)
        return text.encode("utf-8")

    # -- Utility -----------------------------------------------------------

    def list_templates(self) -> list[str]:
        """Return a sorted list of all ``.j2`` template names."""
        if not self.template_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in self.template_dir.rglob("*.j2")
        )
