"""
Load a proof from a bare JSON file or a ZIP archive.

An archive must hold exactly one proof JSON. It may also carry
``screenshots/manifest.json`` and the image files the manifest names.
"""

from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .canonical import loads
from .errors import ProofFormatError
from .export import load_document
from .screenshots import MANIFEST_PATH, ScreenshotEntry, parse_manifest


@dataclass
class ProofSource:
    document: dict[str, Any]
    name: str
    screenshots: list[ScreenshotEntry] | None = None
    images: dict[str, bytes] = field(default_factory=dict)


def _read_archive(path: Path) -> ProofSource:
    with zipfile.ZipFile(path) as archive:
        names = [n for n in archive.namelist() if not n.endswith("/")]
        proofs = [
            n for n in names if n.lower().endswith(".json") and n != MANIFEST_PATH
        ]
        if len(proofs) != 1:
            raise ProofFormatError(
                f"Archive must contain exactly one proof JSON, found {len(proofs)}",
                archive=str(path),
            )
        document = load_document(archive.read(proofs[0]))
        source = ProofSource(document=document, name=proofs[0])
        if MANIFEST_PATH in names:
            source.screenshots = parse_manifest(loads(archive.read(MANIFEST_PATH)))
            wanted = {entry.filename for entry in source.screenshots}
            for name in names:
                if name.startswith("screenshots/") and name != MANIFEST_PATH:
                    short = name[len("screenshots/"):]
                    if short in wanted or name in wanted:
                        source.images[short] = archive.read(name)
                        source.images[name] = source.images[short]
        return source


def load_proof_source(path: str | Path) -> ProofSource:
    """Read ``path`` as a ZIP archive when it is one, else as JSON.

    Raises ``ProofFormatError`` for unusable content, ``OSError`` for I/O
    problems and ``zipfile.BadZipFile`` for a corrupt ``.zip``.
    """
    path = Path(path)
    if path.suffix.lower() == ".zip" or zipfile.is_zipfile(path):
        return _read_archive(path)
    return ProofSource(document=load_document(path.read_bytes()), name=path.name)


__all__ = ["ProofSource", "load_proof_source"]
