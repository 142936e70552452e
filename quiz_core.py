"""Core quiz logic (record loading, filtering and the session engine) shared by the CLI.

Important: This module never modifies the loaded records; a session only selects
references into the record store.
"""

from __future__ import annotations

import csv
import logging
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

logger = logging.getLogger(__name__)

OPTIONS_PER_QUESTION = 4
MAX_COUNT = 100
DEFAULT_COUNT = 10
DELIMITER = "|"


class DataFormatError(ValueError):
    """Raised when a source or flat file does not have the expected layout."""


class NotEnoughQuestions(ValueError):
    """Raised when the record store is too small for the requested quiz."""

    def __init__(self, total: int, count: int):
        super().__init__(f"Not enough questions (total: {total}, requested: {count})")
        self.total = total
        self.count = count


@dataclass(frozen=True)
class Entity:
    # equality and hashing use identity_key only
    identity_key: str
    display_name: str = field(compare=False)
    prompt_attribute: str = field(compare=False)
    row: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Variant:
    """Field selectors and question template for one kind of quiz."""

    name: str
    fieldnames: tuple[str, ...]
    identity_field: str
    display_field: str
    prompt_field: str
    question_template: str

    def to_entity(self, row: dict) -> Entity:
        return Entity(
            identity_key=row[self.identity_field],
            display_name=row[self.display_field],
            prompt_attribute=row[self.prompt_field],
            row=dict(row),
        )

    def question(self, entity: Entity) -> str:
        return self.question_template.format(prompt=entity.prompt_attribute)


CAPITAL = Variant(
    name="capital",
    fieldnames=("cca2", "cca3", "ccn3", "name_common", "name_official", "capital"),
    identity_field="ccn3",
    display_field="name_common",
    prompt_field="capital",
    question_template="which country's capital is {prompt} ?",
)

CODE = Variant(
    name="code",
    fieldnames=("alpha_2", "alpha_3", "name", "numeric", "official_name"),
    identity_field="numeric",
    display_field="name",
    prompt_field="alpha_2",
    question_template="which country has the code {prompt} ?",
)

VARIANTS = {v.name: v for v in (CAPITAL, CODE)}


def detect_variant(fieldnames: Iterable[str]) -> Variant:
    present = set(fieldnames or ())
    for variant in VARIANTS.values():
        if set(variant.fieldnames) <= present:
            return variant
    raise DataFormatError(f"Unrecognized header: {sorted(present)}")


def is_valid_entity(entity: Entity) -> bool:
    # an empty prompt, or one overlapping the name, gives away the answer
    prompt = entity.prompt_attribute
    name = entity.display_name
    return bool(prompt) and prompt not in name and name not in prompt


def build_record_store(entities: Iterable[Entity]) -> tuple[Entity, ...]:
    """Keep valid entities in input order; a repeated identity key keeps its first entity."""
    seen: set[str] = set()
    store: list[Entity] = []
    for entity in entities:
        if not is_valid_entity(entity) or entity.identity_key in seen:
            continue
        seen.add(entity.identity_key)
        store.append(entity)
    return tuple(store)


def read_records(csv_path: Path, variant: Optional[Variant] = None) -> tuple[Variant, list[Entity]]:
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f, delimiter=DELIMITER)
        try:
            if variant is None:
                variant = detect_variant(reader.fieldnames)
            missing = [n for n in variant.fieldnames if n not in (reader.fieldnames or ())]
            if missing:
                raise DataFormatError(f"{csv_path}: missing columns {', '.join(missing)}")

            entities = []
            for row in reader:
                if None in row or any(row[n] is None for n in variant.fieldnames):
                    raise DataFormatError(f"{csv_path}:{reader.line_num}: wrong number of fields")
                entities.append(variant.to_entity(row))
        except csv.Error as e:
            raise DataFormatError(f"{csv_path}:{reader.line_num}: {e}") from e
    return variant, entities


def load_record_store(csv_path: Path, variant: Optional[Variant] = None) -> tuple[Variant, tuple[Entity, ...]]:
    variant, entities = read_records(csv_path, variant)
    store = build_record_store(entities)
    logger.info(
        "Loaded %d %s records from %s, %d usable", len(entities), variant.name, csv_path, len(store)
    )
    return variant, store


class Presenter(Protocol):
    def show_question(self, round_number: int, total_rounds: int, prompt_text: str) -> None: ...

    def show_options(self, display_names: list[str]) -> None: ...

    def read_answer(self) -> str: ...

    def show_verdict(self, is_correct: bool, correct_display_name: str) -> None: ...

    def show_final_tally(self, correct_count: int, total: int, elapsed_seconds: int) -> None: ...


@dataclass
class QuizSession:
    target_count: int
    selections: list[Entity] = field(default_factory=list)
    correct_count: int = 0
    asked_count: int = 0
    elapsed_seconds: int = 0

    @property
    def complete(self) -> bool:
        return self.asked_count == self.target_count


@dataclass
class Round:
    correct_entity: Entity
    options: list[Entity]


def check_pool(store: tuple[Entity, ...], count: int) -> None:
    if not (len(store) > count and len(store) > OPTIONS_PER_QUESTION):
        raise NotEnoughQuestions(len(store), count)


def draw_round(store: tuple[Entity, ...], selections: list[Entity], rng: random.Random) -> Round:
    """Draw a question subject and its distractors, redrawing on any collision.

    Terminates with probability 1 once check_pool() has passed, since the store is
    larger than both the option count and the number of questions asked.
    """
    retries = 0
    while True:
        candidate = rng.choice(store)
        distractors = rng.sample(store, OPTIONS_PER_QUESTION - 1)
        if candidate in distractors or candidate in selections:
            retries += 1
            continue
        if retries:
            logger.debug("Accepted draw after %d retries", retries)
        options = distractors + [candidate]
        rng.shuffle(options)
        return Round(correct_entity=candidate, options=options)


def parse_answer(raw: str) -> Optional[int]:
    """Return the 0-based option index for a raw answer line, or None if unusable."""
    try:
        pick = int((raw or "").strip())
    except ValueError:
        return None
    if 1 <= pick <= OPTIONS_PER_QUESTION:
        return pick - 1
    return None


def is_correct(raw: str, rnd: Round) -> bool:
    idx = parse_answer(raw)
    if idx is None:
        return False
    return rnd.options[idx].display_name == rnd.correct_entity.display_name


def run_quiz(
    store: tuple[Entity, ...],
    count: int,
    presenter: Presenter,
    variant: Variant = CAPITAL,
    rng: Optional[random.Random] = None,
    clock: Callable[[], float] = time.monotonic,
) -> QuizSession:
    check_pool(store, count)
    rng = rng or random.Random()
    session = QuizSession(target_count=count)

    started = clock()
    while not session.complete:
        rnd = draw_round(store, session.selections, rng)
        session.selections.append(rnd.correct_entity)

        presenter.show_question(session.asked_count + 1, count, variant.question(rnd.correct_entity))
        presenter.show_options([e.display_name for e in rnd.options])
        correct = is_correct(presenter.read_answer(), rnd)
        if correct:
            session.correct_count += 1
        presenter.show_verdict(correct, rnd.correct_entity.display_name)
        session.asked_count += 1

    session.elapsed_seconds = int(clock() - started)
    presenter.show_final_tally(session.correct_count, count, session.elapsed_seconds)
    return session
