"""Exception hierarchy for the Forge scaffolding engine.

Every fatal condition derives from :class:`ForgeError` so the pipeline can
catch, log, and halt on a single type.  ``RuntimeVersionMismatch`` is a
warning category: it is logged, never raised.
"""

from __future__ import annotations

from pathlib import Path


class ForgeError(Exception):
    """Base class for every fatal scaffolding error."""


class PrerequisiteMissing(ForgeError):
    """Raised when a required external tool is not on ``PATH``."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"{tool} is not installed. Please install it and rerun.")


class ToolNotFunctional(ForgeError):
    """Raised when a tool is present but its version probe fails."""

    def __init__(self, tool: str, detail: str = "") -> None:
        self.tool = tool
        self.detail = detail
        message = f"{tool} is installed but not functional"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RuntimeVersionMismatch(UserWarning):
    """The detected runtime does not match the expected major version."""

    def __init__(self, detected: str, expected: str) -> None:
        self.detected = detected
        self.expected = expected
        super().__init__(
            f"Java version {detected} detected; expected {expected}.x. "
            "Proceeding but may encounter issues."
        )


class FilesystemWriteFailure(ForgeError):
    """Raised when a directory or file cannot be written."""

    def __init__(self, path: str | Path, cause: BaseException | str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to write {self.path}: {cause}")


class BlueprintCatalogError(ForgeError):
    """Raised when blueprint manifests are missing, invalid, or conflicting."""
