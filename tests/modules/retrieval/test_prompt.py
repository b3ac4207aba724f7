"""Tests for system prompt and citation assembly."""

from ragchat.modules.retrieval.prompt import assemble_prompt, format_context
from ragchat.modules.retrieval.schemas import RetrievedChunk


def retrieved(chunk_id: int, document_id: int, chunk_index: int, content: str, similarity: float) -> RetrievedChunk:
    return RetrievedChunk(
        chunk_id=chunk_id,
        document_id=document_id,
        chunk_index=chunk_index,
        content=content,
        similarity=similarity,
    )


def test_prompt_without_chunks_is_base_prompt():
    prompt = assemble_prompt("Be helpful.", [], {})

    assert prompt.system_prompt == "Be helpful."
    assert prompt.citations == []


def test_prompt_with_context_block():
    """Test the exact layout of the context block."""
    chunks = [
        retrieved(11, 1, 0, "Apples are red.", 0.91234),
        retrieved(12, 2, 3, "Bananas are yellow.", 0.5),
    ]

    prompt = assemble_prompt("Be helpful.", chunks, {1: "fruit.txt", 2: "more-fruit.txt"})

    assert prompt.system_prompt == (
        "Be helpful.\n"
        "\n"
        "KONTEXT:\n"
        "[1] fruit.txt (doc:1, chunk:0, sim:0.912)\n\nApples are red."
        "\n\n---\n\n"
        "[2] more-fruit.txt (doc:2, chunk:3, sim:0.500)\n\nBananas are yellow."
    )


def test_citations_are_numbered_in_rank_order():
    chunks = [retrieved(5, 9, 2, "x" * 1000, 0.7), retrieved(4, 9, 1, "short", 0.6)]

    prompt = assemble_prompt("Base", chunks, {9: "notes"})

    assert [citation.n for citation in prompt.citations] == [1, 2]
    assert [citation.chunk_id for citation in prompt.citations] == [5, 4]
    assert prompt.citations[0].snippet == "x" * 400
    assert prompt.citations[0].content == "x" * 1000
    assert prompt.citations[1].snippet == "short"
    assert prompt.citations[0].document_name == "notes"


def test_missing_document_name_gets_placeholder():
    prompt = assemble_prompt("Base", [retrieved(1, 77, 0, "text", 0.5)], {})

    assert prompt.citations[0].document_name == "Dokument 77"
    assert "[1] Dokument 77 (doc:77, chunk:0, sim:0.500)" in prompt.system_prompt


def test_format_context_empty():
    assert format_context([]) == ""
