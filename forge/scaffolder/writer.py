"""Atomic file materialization.

Files are written to a temporary sibling and renamed into place, so a reader
never sees a partially written file at its final path.  Directory creation is
idempotent, which makes re-running after a failed run safe.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path, PurePosixPath

from forge.errors import FilesystemWriteFailure

LICENSE_HEADER = (
    "/*\n"
    " * Copyright © 2025 Devin B. Royal.\n"
    " * All Rights Reserved.\n"
    " */\n"
)

FILE_MODE = 0o644


def apply_license_header(body: str, header: str = LICENSE_HEADER) -> str:
    """Return *body* with *header* as its first lines, exactly once."""
    if body.startswith(header):
        return body
    return header + body


def atomic_write(path: Path, data: bytes) -> None:
    """Write *data* to *path* via a temp file in the same directory.

    The temp file is removed if anything fails before the rename.
    """
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        # mkstemp creates 0600 files
        os.chmod(tmp, FILE_MODE)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class FileMaterializer:
    """Writes rendered content below a single project root."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.written: list[Path] = []

    def resolve(self, relative: str | Path) -> Path:
        """Map a project-relative POSIX path onto the filesystem.

        Raises:
            FilesystemWriteFailure: The path is absolute or escapes the root.
        """
        rel = PurePosixPath(str(relative).replace("\\", "/"))
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise FilesystemWriteFailure(relative, "path must stay inside the project root")
        return self.root.joinpath(*rel.parts)

    def ensure_dirs(self, *relative: str | Path) -> list[Path]:
        """Create the root and each relative directory; existing ones are fine."""
        created = [self.root]
        created.extend(self.resolve(r) for r in relative)
        for directory in created:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise FilesystemWriteFailure(directory, exc) from exc
        return created

    def write(
        self,
        relative: str | Path,
        content: str | bytes,
        *,
        license_header: bool = False,
    ) -> Path:
        """Write *content* to ``root/relative`` atomically.

        Args:
            relative: Target path relative to the project root.
            content: Rendered text or bytes (bytes are UTF-8 text).
            license_header: Prepend :data:`LICENSE_HEADER` once, at the top.

        Returns:
            The final path.

        Raises:
            FilesystemWriteFailure: Any OS-level failure; nothing is retried.
        """
        target = self.resolve(relative)
        text = content.decode("utf-8") if isinstance(content, bytes) else content
        if license_header:
            text = apply_license_header(text)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(target, text.encode("utf-8"))
        except OSError as exc:
            raise FilesystemWriteFailure(target, exc) from exc

        self.written.append(target)
        return target
