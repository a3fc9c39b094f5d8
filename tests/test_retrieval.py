"""Cosine ranking and best-effort retrieval."""

from __future__ import annotations

import asyncio

import pytest

from sentient.pipelines.meditation import retrieval
from sentient.pipelines.meditation.prompts import build_user_prompt
from sentient.pipelines.meditation.types import ScriptRequest


def test_rank_orders_by_similarity_and_applies_threshold():
    chunks = [
        ("orthogonal", [0.0, 1.0]),
        ("aligned", [2.0, 0.0]),
        ("close", [1.0, 0.2]),
        ("opposite", [-1.0, 0.0]),
    ]

    ranked = retrieval.rank_chunks([1.0, 0.0], chunks, limit=5, min_similarity=0.2)

    assert ranked == ["aligned", "close"]


def test_rank_skips_mismatched_dimensions_and_respects_limit():
    chunks = [("short", [1.0]), ("a", [1.0, 0.0]), ("b", [0.9, 0.1])]

    assert retrieval.rank_chunks([1.0, 0.0], chunks, limit=1, min_similarity=0.0) == ["a"]
    assert retrieval.rank_chunks([0.0, 0.0], chunks, limit=3, min_similarity=0.0) == []


def test_retrieval_failure_yields_no_lines(monkeypatch: pytest.MonkeyPatch):
    class Broken:
        async def embed(self, text):
            raise RuntimeError("throttled")

    monkeypatch.setattr(retrieval, "get_llm_client", lambda: Broken())

    assert asyncio.run(retrieval.retrieve_inspiration("anxious", "calm")) == []


def test_retrieval_ranks_loaded_chunks(monkeypatch: pytest.MonkeyPatch):
    class Embeddings:
        async def embed(self, text):
            return [1.0, 0.0]

    async def fake_chunks(start, destination):
        assert (start, destination) == ("anxious", "calm")
        return [("Feel your feet on the floor.", [1.0, 0.1]), ("Unrelated", [0.0, 1.0])]

    monkeypatch.setattr(retrieval, "get_llm_client", lambda: Embeddings())
    monkeypatch.setattr(retrieval, "_load_chunks", fake_chunks)

    lines = asyncio.run(retrieval.retrieve_inspiration("Anxious", "Calm", "work"))

    assert lines == ["Feel your feet on the floor."]


def test_prompt_includes_note_and_inspiration():
    prompt = build_user_prompt(
        ScriptRequest(start="anxious", destination="calm", note="exam tomorrow"),
        ["Feel your feet on the floor."],
    )

    assert "feels anxious" in prompt
    assert "exam tomorrow" in prompt
    assert "- Feel your feet on the floor." in prompt
    assert "exactly 6" in prompt
