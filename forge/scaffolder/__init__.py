"""Forge scaffolder -- materializes blueprint projects.

Blueprints are YAML manifests (``forge/scaffolder/manifests/``) validated
into ``Blueprint`` models.  Each one is rendered with Jinja2 and written below
the run's base directory with atomic per-file writes.

Quick usage::

    from forge.scaffolder import BlueprintCatalog, BlueprintGenerator

    catalog = BlueprintCatalog.load()
    generator = BlueprintGenerator(run_context, run_log)
    for blueprint in catalog:
        generator.generate(blueprint)
"""

from forge.scaffolder.catalog import BlueprintCatalog, load_blueprint
from forge.scaffolder.generator import BlueprintGenerator, BlueprintResult
from forge.scaffolder.models import Blueprint, DependencyDescriptor, GeneratedFile
from forge.scaffolder.templates import TemplateRenderer
from forge.scaffolder.writer import LICENSE_HEADER, FileMaterializer

__all__ = [
    "Blueprint",
    "BlueprintCatalog",
    "BlueprintGenerator",
    "BlueprintResult",
    "DependencyDescriptor",
    "FileMaterializer",
    "GeneratedFile",
    "LICENSE_HEADER",
    "TemplateRenderer",
    "load_blueprint",
]
