#!/usr/bin/env python3
"""
Interactive country quiz runner.

Behavior:
- Optionally generates the pipe-delimited quiz file from a countries JSON document.
- Otherwise loads the quiz file, drops records that cannot make a fair question,
  and asks N distinct multiple-choice questions.
- Reports the score and elapsed time at the end.
"""

from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path
from typing import Optional

from colorama import Fore, Style, init as colorama_init

from build_csv import generate_content
from logging_config import configure_logging
from quiz_core import (
    DEFAULT_COUNT,
    MAX_COUNT,
    VARIANTS,
    NotEnoughQuestions,
    check_pool,
    load_record_store,
    parse_answer,
    run_quiz,
)

colorama_init(autoreset=True)

EXIT_NOT_ENOUGH_QUESTIONS = 2


class TerminalPresenter:
    def __init__(self, stdin=None):
        self.stdin = stdin
        self._last_pick = 0

    def show_question(self, round_number: int, total_rounds: int, prompt_text: str) -> None:
        print(f"Question {round_number}/{total_rounds}: {prompt_text}")

    def show_options(self, display_names: list[str]) -> None:
        print("Options:")
        for pos, name in enumerate(display_names, start=1):
            print(f"{pos}. {name}")

    def read_answer(self) -> str:
        if self.stdin is None:
            try:
                line = input()
            except EOFError:
                # closed input reads as an empty line, which scores as wrong
                line = ""
        else:
            line = self.stdin.readline()
        idx = parse_answer(line)
        self._last_pick = 0 if idx is None else idx + 1
        return line

    def show_verdict(self, is_correct: bool, correct_display_name: str) -> None:
        verdict = f"{Fore.GREEN}correct" if is_correct else f"{Fore.RED}wrong"
        print(
            f"Your answer #{self._last_pick} is {verdict}{Style.RESET_ALL}. "
            f"Correct answer is {correct_display_name}"
        )

    def show_final_tally(self, correct_count: int, total: int, elapsed_seconds: int) -> None:
        print(f"{Fore.CYAN}Final score: {correct_count}/{total} . Time: {elapsed_seconds}s{Style.RESET_ALL}")


def is_valid_file(value: str) -> Path:
    path = Path(value)
    if not path.is_file():
        raise argparse.ArgumentTypeError("file does not exist")
    return path


def is_valid_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if count < 1:
        raise argparse.ArgumentTypeError("value should be at least 1")
    if count >= MAX_COUNT:
        raise argparse.ArgumentTypeError(f"value should be less than {MAX_COUNT}")
    return count


def get_output_path(input_path) -> Path:
    return Path(input_path).with_suffix(".csv")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Country capital and code quiz.")
    ap.add_argument("-g", "--generate", action="store_true", help="Generate the quiz file from a JSON input")
    ap.add_argument("-l", "--list", action="store_true", help="List the usable records and exit")
    ap.add_argument("-i", "--input", required=True, type=is_valid_file, help="Input file path")
    ap.add_argument("-o", "--output", type=Path, default=None, help="Output file path (default: input with .csv)")
    ap.add_argument(
        "-c", "--count", type=is_valid_count, default=DEFAULT_COUNT, help="Number of questions"
    )
    ap.add_argument("--variant", choices=sorted(VARIANTS), default=None, help="Force the quiz variant")
    ap.add_argument("--seed", type=int, default=None, help="Seed for reproducible randomness")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def list_content(input_path: Path, variant=None) -> int:
    variant, store = load_record_store(input_path, variant)
    for entity in store:
        print(f"{entity.identity_key}\t{entity.display_name}\t{entity.prompt_attribute}")
    print(f"Total: {len(store)} usable {variant.name} records")
    return 0


def ask_quiz(input_path: Path, count: int, variant=None, seed: Optional[int] = None, presenter=None) -> int:
    variant, store = load_record_store(input_path, variant)
    try:
        check_pool(store, count)
    except NotEnoughQuestions:
        print(f"Not enough questions in {input_path} (total: {len(store)})", file=sys.stderr)
        return EXIT_NOT_ENOUGH_QUESTIONS

    print(f"{Fore.CYAN}Asking quiz using {input_path} (total: {len(store)}){Style.RESET_ALL}")
    run_quiz(store, count, presenter or TerminalPresenter(), variant, random.Random(seed))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    variant = VARIANTS[args.variant] if args.variant else None

    try:
        if args.generate:
            output_path = args.output or get_output_path(args.input)
            total = generate_content(args.input, output_path, variant)
            print(f"Generated {total} records from {args.input} into {output_path}")
            return 0
        if args.list:
            return list_content(args.input, variant)
        return ask_quiz(args.input, args.count, variant, args.seed)
    except (ValueError, OSError) as e:
        raise SystemExit(str(e))


if __name__ == "__main__":
    raise SystemExit(main())
