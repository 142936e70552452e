from __future__ import annotations

import pytest

from quiz_core import CAPITAL, Entity


class ScriptedPresenter:
    """Feeds canned answer lines and records everything the engine shows."""

    def __init__(self, answers=None, prompts=None, pick_wrong=False):
        self.answers = list(answers or [])
        # name -> prompt attribute; when given, every answer is the right one,
        # or a wrong option that is still in range with pick_wrong
        self.prompts = prompts
        self.pick_wrong = pick_wrong
        self.questions = []
        self.options = []
        self.verdicts = []
        self.tally = None

    def show_question(self, round_number, total_rounds, prompt_text):
        self.questions.append((round_number, total_rounds, prompt_text))

    def show_options(self, display_names):
        self.options.append(list(display_names))

    def read_answer(self):
        if self.prompts is not None:
            prompt = self.questions[-1][2]
            for pos, name in enumerate(self.options[-1], start=1):
                if prompt.endswith(f" {self.prompts[name]} ?") != self.pick_wrong:
                    return f"{pos}\n"
        return self.answers.pop(0) if self.answers else "\n"

    def show_verdict(self, is_correct, correct_display_name):
        self.verdicts.append((is_correct, correct_display_name))

    def show_final_tally(self, correct_count, total, elapsed_seconds):
        self.tally = (correct_count, total, elapsed_seconds)


def make_country(key, name, capital) -> Entity:
    return CAPITAL.to_entity(
        {
            "cca2": name[:2].upper(),
            "cca3": name[:3].upper(),
            "ccn3": str(key),
            "name_common": name,
            "name_official": name,
            "capital": capital,
        }
    )


def make_pool(size: int) -> tuple[Entity, ...]:
    return tuple(make_country(100 + i, f"Country{i:03d}", f"Capital{i:03d}") for i in range(size))


@pytest.fixture
def scripted():
    return ScriptedPresenter


@pytest.fixture
def country():
    return make_country


@pytest.fixture
def pool():
    return make_pool


@pytest.fixture
def capitals_csv(tmp_path):
    def write(size, name="countries.csv"):
        path = tmp_path / name
        lines = ["cca2|cca3|ccn3|name_common|name_official|capital"]
        for i in range(size):
            lines.append(f"C{i}|C{i:02d}|{100 + i}|Country{i:03d}|Republic {i}|Capital{i:03d}")
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return write
