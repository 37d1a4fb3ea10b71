import argparse
import asyncio
import logging
import sys
from pathlib import Path

from engine.errors import StoryValidationError
from engine.input_gate import GateResult
from game_runner import Game
from settings import settings
from story.story_loader import load_story
from ui.cli_provider import CLIProvider

logger = logging.getLogger(__name__)

QUIT_TOKENS = {"q", "quit", "exit"}
RESTART_TOKENS = {"r"}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play the terminal adventure.")
    parser.add_argument("--story", type=Path, default=settings.story_path, help="Path to the story JSON file.")
    parser.add_argument(
        "--typing-scale",
        type=float,
        default=settings.typing_scale,
        help="Multiplier on typing delays (0 prints lines instantly).",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (DEBUG, INFO, ...).")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors.")
    return parser.parse_args(argv)


async def read_input(prompt: str = "") -> str:
    return await asyncio.to_thread(input, prompt)


async def run(game: Game) -> None:
    await game.start()
    while True:
        try:
            raw = (await read_input(f"{game.gate.prompt} ")).strip()
        except EOFError:
            break

        if raw.lower() in QUIT_TOKENS:
            break
        if game.terminal:
            if raw.lower() in RESTART_TOKENS:
                await game.restart()
            continue

        result = await game.submit(raw)
        if result is GateResult.INVALID:
            await game.queue.wait_idle()


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.typing_scale < 0:
        print("--typing-scale must be >= 0", file=sys.stderr)
        return 2

    try:
        graph = load_story(args.story)
    except (FileNotFoundError, StoryValidationError) as exc:
        print(f"Cannot load story: {exc}", file=sys.stderr)
        return 1

    game = Game(
        CLIProvider(color=not args.no_color),
        graph,
        typing_scale=args.typing_scale,
        prompt=settings.prompt,
    )
    try:
        asyncio.run(run(game))
    except KeyboardInterrupt:
        print("\n[Interrupted] Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
