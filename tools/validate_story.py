#!/usr/bin/env python3
"""Validate story data: graph totality, branch fallbacks, and reachability."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from engine.errors import StoryValidationError  # noqa: E402
from story.story_loader import DEFAULT_STORY_PATH, StoryLoader  # noqa: E402


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate adventure story content.")
    parser.add_argument(
        "story_path",
        nargs="?",
        default=str(DEFAULT_STORY_PATH),
        help="Path to the story JSON file.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str]) -> int:
    args = parse_args(argv[1:])
    story_path = Path(args.story_path).resolve()
    try:
        with story_path.open("r", encoding="utf-8") as handle:
            story_def = json.load(handle)
    except FileNotFoundError:
        print(f"Story file not found: {story_path}")
        return 1
    except json.JSONDecodeError as exc:
        print(f"Failed to parse JSON from {story_path}: {exc}")
        return 1

    try:
        graph = StoryLoader().build(story_def)
    except StoryValidationError as exc:
        print("Validation failed (path: message):")
        for problem in exc.problems:
            print(f" - {problem}")
        return 1

    unreachable = graph.unreachable()
    if unreachable:
        print("Unreachable beats:")
        for beat in unreachable:
            print(f" - {beat}")

    print(f"Validation passed for {story_path}.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
