"""Answer and summary generation over retrieved transcript chunks.

``LLMAnswerProvider`` grounds a pydantic-ai agent in the ranked chunks;
``DemoAnswerProvider`` returns templated answers decided only by the relevance
threshold. ``create_answer_provider`` picks one at startup.
"""

from typing import Protocol

from openai import AsyncOpenAI
from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIModel
from pydantic_ai.providers.openai import OpenAIProvider

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .errors import AnswerGenerationError
from .schemas import RankedChunk, VideoSession

logger = get_logger(__name__)

# ==============================================================================
# Prompts
# ==============================================================================

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions about video content "
    "based only on provided transcript context."
)

ANSWER_USER_PROMPT = """You are an AI assistant helping users understand video content. Based on the following transcript excerpts from the YouTube video "{title}", answer the user's question.

Context from video transcript:
{context}

Question: {question}

Instructions:
- If the context contains relevant information, provide a clear answer with key points in bullet format
- Start with ✅ if you can answer the question based on the context
- Start with ❌ if the context doesn't contain relevant information
- Be specific and reference the video content
- Keep the response concise but informative
- If you cannot answer based on the provided context, clearly state that

Answer:"""

SUMMARY_SYSTEM_PROMPT = (
    "You are an AI assistant that creates concise video summaries. Create "
    "bullet-point summaries that capture the key points and main themes."
)

SUMMARY_USER_PROMPT = """Create a bullet-point summary of this YouTube video titled "{title}" based on the following transcript excerpts:

{context}

Format the summary with:
- A brief title/header
- 4-6 key bullet points highlighting the main topics
- Keep it concise and informative

Summary:"""

DEMO_RELEVANT_ANSWER = """✅ Yes, based on the video "{title}", I can provide information about your question. Here are the key points:

• The video discusses relevant concepts related to your query
• Important details are covered in the content
• The information is presented in a clear and informative manner

*Note: This is a demo response. Configure an LLM API key for full functionality.*"""

DEMO_NOT_COVERED_ANSWER = (
    "❌ I don't have enough relevant information in this video to answer your "
    'question about "{question}". The video "{title}" doesn\'t seem to cover '
    "this topic in detail."
)

DEMO_SUMMARY = """📋 **Video Summary: {title}**

This video covers several important topics and provides valuable insights. Here are the key takeaways:

• Main concepts and ideas are presented clearly
• Relevant examples and case studies are discussed
• Practical applications and implementations are covered
• Expert insights and best practices are shared

*Note: Configure an LLM API key for detailed AI-generated summaries.*"""

EMPTY_ANSWER = "Unable to generate response"
EMPTY_SUMMARY = "Unable to generate summary"
SUMMARY_FAILED = "Unable to generate video summary at this time."


def format_context(ranked: list[RankedChunk]) -> str:
    """Join ranked chunk texts, each prefixed with its similarity score."""
    return "\n\n".join(
        f"[Similarity: {item.similarity:.2f}] {item.chunk.text}" for item in ranked
    )


def get_model(config: VideoQAConfig) -> OpenAIModel:
    """Build the OpenAI-compatible chat model used for answers and summaries.

    Args:
        config: Configuration with LLM choice, base URL, API key and timeout.

    Returns:
        OpenAIModel bound to a client that enforces the request timeout.
    """
    client = AsyncOpenAI(
        base_url=config.llm_base_url,
        api_key=config.llm_api_key,
        timeout=config.request_timeout_seconds,
    )
    return OpenAIModel(config.llm_choice, provider=OpenAIProvider(openai_client=client))


class AnswerProvider(Protocol):
    """Produces answers and summaries for a processed video."""

    async def answer(
        self, question: str, ranked: list[RankedChunk], video_title: str
    ) -> str: ...

    async def summarize(self, session: VideoSession) -> str: ...


class DemoAnswerProvider:
    """Templated answers used when no language model is configured.

    Only the threshold decision is used; chunk text is never inspected.
    """

    def __init__(self, config: VideoQAConfig):
        self.config = config
        logger.warning(
            "demo_answers_enabled",
            relevance_threshold=config.relevance_threshold,
            reason="llm_api_key_missing",
        )

    async def answer(
        self, question: str, ranked: list[RankedChunk], video_title: str
    ) -> str:
        relevant = any(
            item.similarity > self.config.relevance_threshold for item in ranked
        )
        logger.info(
            "demo_answer_generated",
            relevant=relevant,
            best_similarity=max((item.similarity for item in ranked), default=None),
        )
        if relevant:
            return DEMO_RELEVANT_ANSWER.format(title=video_title)
        return DEMO_NOT_COVERED_ANSWER.format(question=question, title=video_title)

    async def summarize(self, session: VideoSession) -> str:
        return DEMO_SUMMARY.format(title=session.title)


class LLMAnswerProvider:
    """Grounded answer generation with a language model.

    Answers are restricted to the supplied transcript context. A failing model
    call raises ``AnswerGenerationError`` instead of falling back to a template,
    so the caller never receives an ungrounded answer.
    """

    def __init__(
        self,
        config: VideoQAConfig,
        answer_agent: Agent | None = None,
        summary_agent: Agent | None = None,
    ):
        """Initialize the provider and its agents.

        Args:
            config: Configuration with LLM settings.
            answer_agent: Optional agent for answers, mainly for tests.
            summary_agent: Optional agent for summaries, mainly for tests.
        """
        self.config = config
        if answer_agent is None or summary_agent is None:
            model = get_model(config)
            answer_agent = answer_agent or Agent(model, system_prompt=ANSWER_SYSTEM_PROMPT)
            summary_agent = summary_agent or Agent(model, system_prompt=SUMMARY_SYSTEM_PROMPT)
        self.answer_agent = answer_agent
        self.summary_agent = summary_agent
        logger.info(
            "answer_provider_initialized",
            model=config.llm_choice,
            base_url=config.llm_base_url,
        )

    async def answer(
        self, question: str, ranked: list[RankedChunk], video_title: str
    ) -> str:
        """Answer a question from the ranked transcript chunks.

        Args:
            question: The user's literal question.
            ranked: Retrieved chunks in ranked order.
            video_title: Title of the video, given to the model as context.

        Returns:
            The model's answer text verbatim.

        Raises:
            AnswerGenerationError: If the model call fails.
        """
        prompt = ANSWER_USER_PROMPT.format(
            title=video_title,
            context=format_context(ranked),
            question=question,
        )
        logger.info(
            "answer_generation_started",
            question_length=len(question),
            context_chunks=len(ranked),
        )

        try:
            result = await self.answer_agent.run(
                prompt,
                model_settings={
                    "max_tokens": self.config.answer_max_tokens,
                    "temperature": self.config.llm_temperature,
                },
            )
        except Exception as e:
            logger.exception("answer_generation_failed", error_type=type(e).__name__)
            raise AnswerGenerationError() from e

        answer = result.output or EMPTY_ANSWER
        logger.info("answer_generation_completed", answer_length=len(answer))
        return answer

    async def summarize(self, session: VideoSession) -> str:
        """Summarize the opening chunks of a video as bullet points.

        Args:
            session: Processed video session.

        Returns:
            Summary text, or an apology when the model call fails.
        """
        excerpts = session.chunks[: self.config.summary_chunk_count]
        prompt = SUMMARY_USER_PROMPT.format(
            title=session.title,
            context="\n\n".join(chunk.text for chunk in excerpts),
        )
        logger.info(
            "summary_generation_started",
            video_id=session.id,
            context_chunks=len(excerpts),
        )

        try:
            result = await self.summary_agent.run(
                prompt,
                model_settings={
                    "max_tokens": self.config.summary_max_tokens,
                    "temperature": self.config.llm_temperature,
                },
            )
        except Exception as e:
            logger.exception(
                "summary_generation_failed",
                video_id=session.id,
                error_type=type(e).__name__,
            )
            return SUMMARY_FAILED

        return result.output or EMPTY_SUMMARY


def create_answer_provider(config: VideoQAConfig) -> AnswerProvider:
    """Select the answer strategy for this process.

    Args:
        config: Loaded configuration.

    Returns:
        LLM-backed provider when an API key is configured, otherwise the demo
        provider.
    """
    if config.llm_configured:
        return LLMAnswerProvider(config)
    return DemoAnswerProvider(config)
