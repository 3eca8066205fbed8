"""Split a physical file into raw document blobs.

Several documents may share one file, separated by a line holding only
the separator token (``+++`` by default).
"""

from __future__ import annotations

DEFAULT_SEPARATOR = "+++"


def split_documents(text: str, separator: str = DEFAULT_SEPARATOR) -> list[str]:
    """Return the non-empty pieces of *text* between separator lines.

    A file without any separator line yields a single piece.
    """
    pieces: list[str] = []
    current: list[str] = []

    for line in text.splitlines():
        if line.strip() == separator:
            pieces.append("\n".join(current))
            current = []
            continue
        current.append(line)
    pieces.append("\n".join(current))

    return [p.strip() + "\n" for p in pieces if p.strip()]
