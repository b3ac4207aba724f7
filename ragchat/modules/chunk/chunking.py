"""Deterministic paragraph-based text chunking."""

import re
from dataclasses import dataclass
from typing import List

from ..common.exceptions import InvalidInputError

PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")
PARAGRAPH_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class TextChunk:
    """A contiguous piece of a document and its position in the document."""

    index: int
    content: str


def chunk_text(raw_text: str, max_size: int = 900) -> List[TextChunk]:
    """Split text into ordered chunks of at most ``max_size`` characters.

    Paragraphs (separated by blank lines) are packed greedily: a paragraph is
    appended to the current chunk, joined by a blank line, while the result
    stays within ``max_size``; otherwise the chunk is closed and the paragraph
    starts the next one. A chunk still longer than ``max_size`` (a single
    oversized paragraph) is then cut into ``max_size`` slices, the last of
    which may be shorter.

    The function is pure: the same input always gives the same chunks.

    Args:
        raw_text: Text to split. ``\\r\\n`` line endings are normalised.
        max_size: Maximum chunk length in characters

    Returns:
        Chunks with indices 0..N-1 in document order; empty for blank input

    Raises:
        InvalidInputError: If max_size is smaller than 1
    """
    if max_size < 1:
        raise InvalidInputError(f"max_size must be at least 1, got {max_size}")

    text = (raw_text or "").replace("\r\n", "\n").strip()
    if not text:
        return []

    paragraphs = [paragraph.strip() for paragraph in PARAGRAPH_BREAK.split(text)]
    paragraphs = [paragraph for paragraph in paragraphs if paragraph]

    packed: List[str] = []
    buffer = ""
    for paragraph in paragraphs:
        if not buffer:
            buffer = paragraph
        elif len(buffer) + len(PARAGRAPH_SEPARATOR) + len(paragraph) <= max_size:
            buffer += PARAGRAPH_SEPARATOR + paragraph
        else:
            packed.append(buffer)
            buffer = paragraph

    if buffer:
        packed.append(buffer)

    pieces: List[str] = []
    for content in packed:
        if len(content) <= max_size:
            pieces.append(content)
            continue
        pieces.extend(content[start : start + max_size] for start in range(0, len(content), max_size))

    return [TextChunk(index=index, content=content) for index, content in enumerate(pieces)]
