"""Split generation output into named files."""
from __future__ import annotations

import re
from typing import Iterable

from .types import GeneratedFile

# "=== path/to/file.ext ===" alone on a line.
_MARKER = re.compile(r"^={3,}[ \t]+(?P<name>.+?)[ \t]+={3,}[ \t\r]*$", re.MULTILINE)
_LEADING_EQUALS = re.compile(r"^=+\s*")


def parse_generated_files(text: str) -> list[GeneratedFile]:
    """Return the files delimited by marker lines, in order of appearance.

    Text before the first marker is ignored. Content is trimmed and any stray
    leading run of ``=`` echoed by the model is removed. No markers means an
    empty list; choosing a fallback is up to the caller.
    """
    markers = list(_MARKER.finditer(text or ""))
    files: list[GeneratedFile] = []
    for index, match in enumerate(markers):
        end = markers[index + 1].start() if index + 1 < len(markers) else len(text)
        content = text[match.end() : end].strip()
        content = _LEADING_EQUALS.sub("", content, count=1)
        files.append(GeneratedFile(path=match.group("name").strip(), content=content))
    return files


def render_generated_files(files: Iterable[GeneratedFile]) -> str:
    """Inverse of :func:`parse_generated_files` for content without marker lines."""
    return "\n".join(f"=== {item.path} ===\n{item.content}\n" for item in files)


__all__ = ["parse_generated_files", "render_generated_files"]
