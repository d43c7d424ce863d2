"""Forge -- declarative blueprint scaffolding engine.

Materializes a workspace of independent Maven project skeletons from YAML
blueprint manifests in a single fail-fast run.
"""

__version__ = "1.0.0"
