"""Assembly of the system prompt and its numbered citations."""

from typing import List, Mapping, Sequence

from ...infrastructure.config.settings import get_settings
from .schemas import AssembledPrompt, CitationRecord, RetrievedChunk

CONTEXT_HEADER = "KONTEXT:"
CONTEXT_SEPARATOR = "\n\n---\n\n"


def missing_document_name(document_id: int) -> str:
    return f"Dokument {document_id}"


def build_citations(
    chunks: Sequence[RetrievedChunk],
    document_names: Mapping[int, str],
    snippet_length: int,
) -> List[CitationRecord]:
    """Number the chunks 1..N in the order given and attach display names."""
    return [
        CitationRecord(
            n=position,
            chunk_id=chunk.chunk_id,
            document_id=chunk.document_id,
            document_name=document_names.get(chunk.document_id) or missing_document_name(chunk.document_id),
            chunk_index=chunk.chunk_index,
            similarity=chunk.similarity,
            snippet=chunk.content[:snippet_length],
            content=chunk.content,
        )
        for position, chunk in enumerate(chunks, start=1)
    ]


def format_context(citations: Sequence[CitationRecord]) -> str:
    """Render the context block, one entry per citation.

    Entry format::

        [n] <name> (doc:<id>, chunk:<index>, sim:<0.000>)

        <full chunk content>
    """
    return CONTEXT_SEPARATOR.join(
        f"[{citation.n}] {citation.document_name} "
        f"(doc:{citation.document_id}, chunk:{citation.chunk_index}, sim:{citation.similarity:.3f})"
        f"\n\n{citation.content}"
        for citation in citations
    )


def assemble_prompt(
    base_prompt: str,
    chunks: Sequence[RetrievedChunk],
    document_names: Mapping[int, str],
) -> AssembledPrompt:
    """Build the system prompt for a chat turn.

    With no retrieved chunks the system prompt is just ``base_prompt``;
    otherwise a blank line, ``KONTEXT:`` and the context block follow it.

    Args:
        base_prompt: Instruction text (owner's prompt or the default)
        chunks: Retrieved chunks in rank order
        document_names: Display names by document id; missing ids get a placeholder

    Returns:
        The system prompt and the citations, numbered as in the context block
    """
    citations = build_citations(chunks, document_names, get_settings().SNIPPET_LENGTH)
    context = format_context(citations)

    parts = [base_prompt]
    if context.strip():
        parts.extend(["", CONTEXT_HEADER, context])

    return AssembledPrompt(system_prompt="\n".join(parts), citations=citations)
