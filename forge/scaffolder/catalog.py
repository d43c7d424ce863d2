"""Blueprint manifest loading.

Blueprints live as YAML manifests in ``forge/scaffolder/manifests/``.  The
``index.yml`` file lists them in materialization order.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Iterator

import yaml
from pydantic import ValidationError

from forge.errors import BlueprintCatalogError
from forge.scaffolder.models import Blueprint

_DEFAULT_MANIFEST_DIR = Path(__file__).parent / "manifests"
INDEX_FILE = "index.yml"


def _read_yaml(path: Path) -> Any:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BlueprintCatalogError(f"Cannot read manifest {path}: {exc}") from exc
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise BlueprintCatalogError(f"Invalid YAML in {path}: {exc}") from exc


def load_blueprint(path: str | Path) -> Blueprint:
    """Parse and validate a single blueprint manifest."""
    path = Path(path)
    data = _read_yaml(path)
    if not isinstance(data, dict):
        raise BlueprintCatalogError(f"{path.name}: manifest must be a mapping")
    try:
        return Blueprint.model_validate(data)
    except ValidationError as exc:
        raise BlueprintCatalogError(f"{path.name}: {exc}") from exc


class BlueprintCatalog:
    """Ordered, name-unique collection of blueprints."""

    def __init__(self, blueprints: Iterable[Blueprint]) -> None:
        self._blueprints: list[Blueprint] = []
        seen: set[str] = set()
        for blueprint in blueprints:
            # Target directories are named after the blueprint, so names
            # must differ even on case-insensitive filesystems.
            key = blueprint.name.lower()
            if key in seen:
                raise BlueprintCatalogError(
                    f"Duplicate blueprint target directory: {blueprint.name}"
                )
            seen.add(key)
            self._blueprints.append(blueprint)

    @classmethod
    def load(cls, manifest_dir: str | Path | None = None) -> "BlueprintCatalog":
        """Load every manifest listed in ``index.yml`` of *manifest_dir*."""
        directory = Path(manifest_dir) if manifest_dir is not None else _DEFAULT_MANIFEST_DIR
        index = _read_yaml(directory / INDEX_FILE)
        entries = index.get("blueprints") if isinstance(index, dict) else None
        if not isinstance(entries, list) or not entries:
            raise BlueprintCatalogError(
                f"{directory / INDEX_FILE}: expected a non-empty 'blueprints' list"
            )
        return cls(load_blueprint(directory / str(entry)) for entry in entries)

    # -- Access ------------------------------------------------------------

    def __iter__(self) -> Iterator[Blueprint]:
        return iter(self._blueprints)

    def __len__(self) -> int:
        return len(self._blueprints)

    def names(self) -> list[str]:
        return [b.name for b in self._blueprints]

    def get(self, name: str) -> Blueprint:
        for blueprint in self._blueprints:
            if blueprint.name.lower() == name.lower():
                return blueprint
        raise BlueprintCatalogError(f"Unknown blueprint: {name}")

    def select(self, names: Iterable[str] | None = None) -> list[Blueprint]:
        """Blueprints matching *names*, in declared order.

        ``None`` selects everything.  Unknown names are an error.
        """
        if names is None:
            return list(self._blueprints)
        wanted = {self.get(n).name for n in names}
        return [b for b in self._blueprints if b.name in wanted]
