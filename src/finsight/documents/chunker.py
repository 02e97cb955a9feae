"""Split extracted text into retrieval chunks."""
import re
from typing import List

SENTENCE_PATTERN = re.compile(r"[^.!?]+(?:[.!?]+|$)")


def split_into_chunks(text: str, chunk_size: int = 1000) -> List[str]:
    """
    Pack text into chunks of at most chunk_size characters.

    Paragraphs (blank-line separated) are packed greedily. A paragraph longer
    than chunk_size is split into sentences, and a sentence longer than
    chunk_size into fixed-size pieces.

    Args:
        text: Full document text
        chunk_size: Target maximum chunk length

    Returns:
        Non-empty, stripped chunks in document order
    """
    chunks: List[str] = []
    current = ""

    for paragraph in text.split("\n\n"):
        paragraph = paragraph.strip()
        if not paragraph:
            continue

        if len(paragraph) > chunk_size:
            for piece in _split_paragraph(paragraph, chunk_size):
                if len(current) + len(piece) <= chunk_size:
                    current += piece
                else:
                    _append(chunks, current)
                    current = piece
        else:
            separator = "\n\n" if current else ""
            if len(current) + len(separator) + len(paragraph) <= chunk_size:
                current += separator + paragraph
            else:
                _append(chunks, current)
                current = paragraph

    _append(chunks, current)
    return chunks


def _split_paragraph(paragraph: str, chunk_size: int) -> List[str]:
    sentences = [s for s in SENTENCE_PATTERN.findall(paragraph) if s.strip()] or [paragraph]
    pieces = []
    for sentence in sentences:
        if len(sentence) <= chunk_size:
            pieces.append(sentence)
        else:
            pieces.extend(sentence[i:i + chunk_size] for i in range(0, len(sentence), chunk_size))
    return pieces


def _append(chunks: List[str], chunk: str) -> None:
    chunk = chunk.strip()
    if chunk:
        chunks.append(chunk)
