"""Unit tests for answer and summary generation."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic_ai.models.openai import OpenAIModel

from src.video_qa.answer_service import (
    ANSWER_SYSTEM_PROMPT,
    EMPTY_ANSWER,
    SUMMARY_FAILED,
    SUMMARY_SYSTEM_PROMPT,
    DemoAnswerProvider,
    LLMAnswerProvider,
    create_answer_provider,
    format_context,
    get_model,
)
from src.video_qa.config import VideoQAConfig
from src.video_qa.errors import AnswerGenerationError
from src.video_qa.schemas import Chunk, RankedChunk, VideoMetadata, VideoSession


def _ranked(*scores: float) -> list[RankedChunk]:
    return [
        RankedChunk(chunk=Chunk(id=i, text=f"chunk {i} text"), similarity=score)
        for i, score in enumerate(scores)
    ]


def _session(chunk_count: int) -> VideoSession:
    chunks = [Chunk(id=i, text=f"excerpt {i}") for i in range(chunk_count)]
    return VideoSession(
        id="dQw4w9WgXcQ",
        title="Never Gonna Give You Up",
        metadata=VideoMetadata(
            id="dQw4w9WgXcQ",
            title="Never Gonna Give You Up",
            url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            thumbnail_url="https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        ),
        transcript=" ".join(chunk.text for chunk in chunks),
        chunks=chunks,
        embeddings=[[1.0, 0.0] for _ in chunks],
    )


def _agent(output: str | None = "An answer") -> MagicMock:
    agent = MagicMock()
    agent.run = AsyncMock(return_value=MagicMock(output=output))
    return agent


@pytest.mark.unit
class TestFormatContext:
    """Test suite for format_context helper."""

    def test_scores_prefix_each_excerpt(self) -> None:
        """Test the similarity prefix and separator."""
        context = format_context(_ranked(0.874, 0.5))

        assert context == (
            "[Similarity: 0.87] chunk 0 text\n\n[Similarity: 0.50] chunk 1 text"
        )

    def test_empty(self) -> None:
        """Test that no chunks give an empty context."""
        assert format_context([]) == ""


@pytest.mark.unit
class TestDemoAnswerProvider:
    """Test suite for DemoAnswerProvider class."""

    @pytest.fixture
    def provider(self) -> DemoAnswerProvider:
        """Create demo provider with the default threshold."""
        return DemoAnswerProvider(VideoQAConfig(relevance_threshold=0.3))

    @pytest.mark.asyncio
    async def test_relevant_answer(self, provider: DemoAnswerProvider) -> None:
        """Test that a chunk above the threshold gives the positive template."""
        answer = await provider.answer("What song is it?", _ranked(0.1, 0.31), "Rick")

        assert answer.startswith("✅")
        assert '"Rick"' in answer

    @pytest.mark.asyncio
    async def test_not_covered_answer(self, provider: DemoAnswerProvider) -> None:
        """Test that low similarity gives the negative template."""
        answer = await provider.answer("Quantum physics?", _ranked(0.05, 0.2), "Rick")

        assert answer.startswith("❌")
        assert '"Quantum physics?"' in answer
        assert '"Rick"' in answer

    @pytest.mark.asyncio
    async def test_threshold_is_exclusive(self, provider: DemoAnswerProvider) -> None:
        """Test that a similarity equal to the threshold is not relevant."""
        answer = await provider.answer("Anything?", _ranked(0.3), "Rick")

        assert answer.startswith("❌")

    @pytest.mark.asyncio
    async def test_no_chunks(self, provider: DemoAnswerProvider) -> None:
        """Test that an empty ranking is treated as not covered."""
        answer = await provider.answer("Anything?", [], "Rick")

        assert answer.startswith("❌")

    @pytest.mark.asyncio
    async def test_summary_template(self, provider: DemoAnswerProvider) -> None:
        """Test the demo summary."""
        summary = await provider.summarize(_session(2))

        assert summary.startswith("📋 **Video Summary: Never Gonna Give You Up**")


@pytest.mark.unit
class TestLLMAnswerProvider:
    """Test suite for LLMAnswerProvider class."""

    @pytest.fixture
    def config(self) -> VideoQAConfig:
        """Create test configuration with LLM settings."""
        return VideoQAConfig(
            llm_api_key="test_key",
            llm_choice="gpt-4o-mini",
            llm_temperature=0.3,
            answer_max_tokens=500,
            summary_max_tokens=400,
            summary_chunk_count=5,
        )

    def test_initialization_builds_agents(self, config: VideoQAConfig) -> None:
        """Test that agents are built with the right system prompts."""
        with (
            patch("src.video_qa.answer_service.get_model") as mock_get_model,
            patch("src.video_qa.answer_service.Agent") as mock_agent,
        ):
            LLMAnswerProvider(config)

            mock_get_model.assert_called_once_with(config)
            prompts = [call.kwargs["system_prompt"] for call in mock_agent.call_args_list]
            assert prompts == [ANSWER_SYSTEM_PROMPT, SUMMARY_SYSTEM_PROMPT]

    @pytest.mark.asyncio
    async def test_answer_prompt_and_settings(self, config: VideoQAConfig) -> None:
        """Test that the prompt carries title, context and question."""
        answer_agent = _agent("✅ It is a music video.")
        provider = LLMAnswerProvider(config, answer_agent=answer_agent, summary_agent=_agent())

        answer = await provider.answer("What is it?", _ranked(0.9), "Rick Astley")

        assert answer == "✅ It is a music video."
        prompt = answer_agent.run.call_args.args[0]
        assert 'YouTube video "Rick Astley"' in prompt
        assert "[Similarity: 0.90] chunk 0 text" in prompt
        assert "Question: What is it?" in prompt
        assert answer_agent.run.call_args.kwargs["model_settings"] == {
            "max_tokens": 500,
            "temperature": 0.3,
        }

    @pytest.mark.asyncio
    async def test_answer_failure_raises(self, config: VideoQAConfig) -> None:
        """Test that a failing model call is not replaced by a template."""
        answer_agent = MagicMock()
        answer_agent.run = AsyncMock(side_effect=RuntimeError("upstream down"))
        provider = LLMAnswerProvider(config, answer_agent=answer_agent, summary_agent=_agent())

        with pytest.raises(AnswerGenerationError):
            await provider.answer("What is it?", _ranked(0.9), "Rick Astley")

    @pytest.mark.asyncio
    async def test_empty_output(self, config: VideoQAConfig) -> None:
        """Test the placeholder for an empty model reply."""
        provider = LLMAnswerProvider(config, answer_agent=_agent(""), summary_agent=_agent())

        answer = await provider.answer("What is it?", _ranked(0.9), "Rick Astley")

        assert answer == EMPTY_ANSWER

    @pytest.mark.asyncio
    async def test_summary_uses_first_chunks(self, config: VideoQAConfig) -> None:
        """Test that only the opening chunks are sent for summary."""
        summary_agent = _agent("• Point one")
        provider = LLMAnswerProvider(config, answer_agent=_agent(), summary_agent=summary_agent)

        summary = await provider.summarize(_session(8))

        assert summary == "• Point one"
        prompt = summary_agent.run.call_args.args[0]
        assert "excerpt 4" in prompt
        assert "excerpt 5" not in prompt
        assert 'titled "Never Gonna Give You Up"' in prompt
        assert summary_agent.run.call_args.kwargs["model_settings"]["max_tokens"] == 400

    @pytest.mark.asyncio
    async def test_summary_failure_apologizes(self, config: VideoQAConfig) -> None:
        """Test that summary errors degrade to a fixed message."""
        summary_agent = MagicMock()
        summary_agent.run = AsyncMock(side_effect=RuntimeError("upstream down"))
        provider = LLMAnswerProvider(config, answer_agent=_agent(), summary_agent=summary_agent)

        assert await provider.summarize(_session(3)) == SUMMARY_FAILED


@pytest.mark.unit
class TestProviderSelection:
    """Test suite for get_model and create_answer_provider."""

    def test_get_model(self) -> None:
        """Test that an OpenAI-compatible model is built."""
        config = VideoQAConfig(llm_api_key="test_key", llm_choice="gpt-4o-mini")

        model = get_model(config)

        assert isinstance(model, OpenAIModel)
        assert model.model_name == "gpt-4o-mini"

    def test_demo_without_key(self) -> None:
        """Test that a missing key selects the demo provider."""
        config = VideoQAConfig(llm_api_key="")

        assert isinstance(create_answer_provider(config), DemoAnswerProvider)

    def test_llm_with_key(self) -> None:
        """Test that an API key selects the LLM provider."""
        config = VideoQAConfig(llm_api_key="test_key")

        with patch("src.video_qa.answer_service.Agent"):
            assert isinstance(create_answer_provider(config), LLMAnswerProvider)
