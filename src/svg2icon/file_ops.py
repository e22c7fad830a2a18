from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .errors import SerializationError


ICO = "ico"
ICNS = "icns"


@dataclass(frozen=True)
class OutputTarget:
    kind: str
    path: Path


def resolve_targets(svg_path: Path, output: Path) -> list[OutputTarget]:
    """Map the output argument onto the icon files to produce.

    A directory gets ``<stem>.ico`` and ``<stem>.icns``; ``.ico`` and ``.icns``
    select a single format; ``.icon`` or no extension produces both next to
    each other.
    """
    if output.is_dir():
        return [
            OutputTarget(ICO, output / f"{svg_path.stem}.ico"),
            OutputTarget(ICNS, output / f"{svg_path.stem}.icns"),
        ]

    suffix = output.suffix.lower()
    if suffix == ".ico":
        return [OutputTarget(ICO, output)]
    if suffix == ".icns":
        return [OutputTarget(ICNS, output)]
    if suffix in {"", ".icon"}:
        return [
            OutputTarget(ICO, output.with_suffix(".ico")),
            OutputTarget(ICNS, output.with_suffix(".icns")),
        ]
    raise ValueError(
        f"Unsupported output extension {output.suffix!r}; use .ico, .icns, .icon or a directory."
    )


def atomic_write(path: Path, data: bytes, mode: int = 0o644) -> None:
    """Write ``data`` so that ``path`` is either untouched or complete."""
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
        raise SerializationError(f"Failed to write {path}: {exc}") from exc
