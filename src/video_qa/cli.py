"""Command-line interface for chatting with a YouTube video."""

import argparse
import asyncio

from src.utils.logging import configure_logging, get_logger

from .config import get_config
from .errors import VideoQAError
from .service import VideoQAService

logger = get_logger(__name__)

COMMANDS_HELP = "Commands: /summary, /history, /reset, /quit"


def _print_banner(service: VideoQAService) -> None:
    config = service.config
    modes = service.provider_modes
    print("\n" + "=" * 60)
    print("YouTube Video Q&A")
    print("=" * 60)
    print(f"Transcripts: {modes['transcripts']}")
    print(f"Embeddings: {modes['embeddings']} ({config.embedding_model})")
    print(f"Answers: {modes['answers']} ({config.llm_choice})")
    print(f"Chunk size: {config.chunk_size} chars, overlap {config.chunk_overlap} words")
    if "demo" in modes.values():
        print("\n⚠️  DEMO MODE - configure API keys in .env for real answers")
    print("=" * 60 + "\n")


async def _load_video(service: VideoQAService, url: str) -> bool:
    print(f"Processing {url} ...")
    try:
        session = await service.process_video(url)
    except VideoQAError as e:
        print(f"\n❌ {e}")
        return False

    print(f"\nLoaded \"{session.title}\" ({len(session.chunks)} chunks)\n")
    print(session.messages[0].content)
    print()
    return True


async def chat_loop(service: VideoQAService) -> None:
    """Read questions from stdin until the user quits."""
    print(COMMANDS_HELP)
    while True:
        try:
            line = (await asyncio.to_thread(input, "\n> ")).strip()
        except EOFError:
            break

        if not line:
            continue
        if line == "/quit":
            break
        if line == "/reset":
            service.reset()
            url = (await asyncio.to_thread(input, "YouTube URL: ")).strip()
            if not await _load_video(service, url):
                return
            continue
        if line == "/history":
            for message in service.store.require().messages:
                print(f"[{message.timestamp:%H:%M:%S}] {message.role}: {message.content}\n")
            continue

        try:
            if line == "/summary":
                print("\n" + await service.generate_summary())
            else:
                print("\n" + await service.ask_question(line))
        except VideoQAError as e:
            print(f"\n❌ {e}")


async def main() -> None:
    """CLI entry point.

    Parses arguments, builds the service from the environment configuration,
    processes the video and starts the interactive chat.
    """
    parser = argparse.ArgumentParser(
        description="YouTube Video Q&A - ask questions about a video's transcript",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Chat about a video (using .env config)
  python -m src.video_qa.cli https://www.youtube.com/watch?v=dQw4w9WgXcQ

  # Ask a single question and exit
  python -m src.video_qa.cli https://youtu.be/dQw4w9WgXcQ -q "What is the song about?"

  # Print a summary and exit
  python -m src.video_qa.cli https://youtu.be/dQw4w9WgXcQ --summary
        """,
    )

    parser.add_argument("url", help="YouTube watch or youtu.be URL")
    parser.add_argument(
        "-q",
        "--question",
        type=str,
        help="Ask one question and exit instead of starting a chat",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a summary of the video and exit",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        help="Number of transcript chunks used as context",
    )

    args = parser.parse_args()
    if args.top_k is not None and args.top_k < 1:
        parser.error("--top-k must be at least 1")

    # Load configuration
    config = get_config()
    if args.top_k is not None:
        config.top_k = args.top_k
    configure_logging(config.log_level)

    logger.info("cli_started", url=args.url, one_shot=bool(args.question or args.summary))

    service = VideoQAService(config)
    _print_banner(service)

    if not await _load_video(service, args.url):
        return

    try:
        if args.summary:
            print(await service.generate_summary())
        if args.question:
            print(await service.ask_question(args.question))
    except VideoQAError as e:
        print(f"\n❌ {e}")
        return

    if not (args.question or args.summary):
        await chat_loop(service)

    session = service.session
    logger.info("cli_completed", messages=len(session.messages) if session else 0)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
