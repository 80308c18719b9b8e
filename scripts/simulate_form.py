#!/usr/bin/env python3
"""Simulate filling in a stored questionnaire with mock answers.

Walks the form the way a UI would: recompute visibility, answer every
visible unanswered question, repeat until nothing new appears, then submit.
Prints each question asked, the answer chosen, which items became visible,
and the final validation result.

By default answers are **randomised** (``--random``, on by default) so each
run explores a different branch of the form.  Use ``--no-random`` for a
deterministic run.

Usage::

    # Default run (general-intake, random answers)
    python scripts/simulate_form.py

    # Deterministic run
    python scripts/simulate_form.py --no-random

    # Another questionnaire, seeded patient age
    python scripts/simulate_form.py -f my-form --age 12

    # List available questionnaires
    python scripts/simulate_form.py --list-forms
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from questionnaire_engine.config import configure_logging, load_settings
from questionnaire_engine.interfaces import ExpressionEvaluator
from questionnaire_engine.models import Item, ItemType, Reference, iter_items
from questionnaire_engine.session import FormSession
from questionnaire_engine.store import QuestionnaireStore

_DEFAULT_FORM = "general-intake"
_MAX_PASSES = 10

# Item types that never take an answer.
_STRUCTURAL_TYPES = {ItemType.GROUP, ItemType.DISPLAY}

_RANDOM_TEXT_POOL = [
    "Headache since yesterday",
    "Cough for two weeks",
    "Follow-up visit",
    "No complaints",
]


# ---------------------------------------------------------------------------
# Mock collaborators
# ---------------------------------------------------------------------------


class DottedPathEvaluator(ExpressionEvaluator):
    """Resolves ``%name.field.sub`` paths against the context dict.

    Enough for demo forms; real deployments plug in a FHIRPath library.
    """

    def evaluate(self, expression: str, context: dict[str, Any]) -> list[Any]:
        node: Any = context
        for part in expression.lstrip("%").split("."):
            if not isinstance(node, dict) or part not in node:
                return []
            node = node[part]
        return [node]


def mock_answer(item: Item, rng: random.Random | None) -> Any:
    """Pick a raw answer for *item*; deterministic when *rng* is None."""
    if item.type is ItemType.BOOLEAN:
        return rng.choice([True, False]) if rng else True
    if item.type is ItemType.INTEGER:
        return rng.randint(0, 10) if rng else 3
    if item.type is ItemType.DECIMAL:
        return round(rng.uniform(0, 2), 1) if rng else 0.5
    if item.type is ItemType.DATE:
        return f"2024-0{rng.randint(1, 9)}-15" if rng else "2024-01-15"
    if item.type is ItemType.DATE_TIME:
        return "2024-01-15T09:00:00Z"
    if item.type in (ItemType.CHOICE, ItemType.CODING) and item.answer_option:
        option = rng.choice(item.answer_option) if rng else item.answer_option[0]
        if option.value_coding is not None:
            return option.value_coding
        return option.value_string if option.value_string is not None else option.value_integer
    text = rng.choice(_RANDOM_TEXT_POOL) if rng else _RANDOM_TEXT_POOL[0]
    if item.max_length is not None:
        text = text[: item.max_length]
    return text


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------


def run_simulation(
    store: QuestionnaireStore,
    form_id: str,
    age: int,
    randomise: bool,
    console: Console,
) -> bool:
    questionnaire = store.get(form_id)
    if questionnaire is None:
        console.print(f"[red]ERROR[/] Unknown questionnaire {form_id!r}; try --list-forms")
        return False

    rng = random.Random() if randomise else None
    session = FormSession.start(
        questionnaire,
        Reference(reference="Patient/sim"),
        context={"patient": {"age": age}},
        evaluator=DottedPathEvaluator(),
    )

    console.rule(f"[bold]{questionnaire.title or questionnaire.id}")
    for item in iter_items(questionnaire.item):
        answer = session.answer_for(item.link_id)
        if answer is not None:
            console.print(f"  [dim]seeded[/] {item.text or item.link_id}: {answer.value}")

    for pass_no in range(1, _MAX_PASSES + 1):
        visibility = session.visibility()
        pending = [
            item
            for item in iter_items(questionnaire.item)
            if visibility[item.link_id]
            and item.type not in _STRUCTURAL_TYPES
            and session.answer_for(item.link_id) is None
        ]
        if not pending:
            break

        console.print(f"\n[bold cyan]Pass {pass_no}[/]: {len(pending)} question(s)")
        for item in pending:
            answer = session.set_answer(item.link_id, mock_answer(item, rng))
            type_tag = escape(f"[{item.type.value}]")
            console.print(f"    [dim]Q:[/] {item.text} ({item.link_id}) {type_tag}")
            console.print(f"    [dim]A:[/] {answer.value if answer else '--'}")

        newly_visible = [
            link_id
            for link_id, shown in session.visibility().items()
            if shown and not visibility[link_id]
        ]
        if newly_visible:
            console.print(f"  [green]→[/] now visible: {', '.join(newly_visible)}")

    result = session.submit()

    table = Table(title="Submission")
    table.add_column("Status")
    table.add_column("Errors")
    status = "[green]completed[/]" if result.valid else f"[red]{session.response.status}[/]"
    table.add_row(status, "\n".join(result.errors) or "(none)")
    console.print()
    console.print(table)

    console.print_json(json.dumps(session.response.model_dump(by_alias=True, exclude_none=True)))
    return result.valid


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Simulate filling in a stored questionnaire with mock answers.",
    )
    parser.add_argument(
        "-f", "--form",
        default=_DEFAULT_FORM,
        help=f"Questionnaire id to simulate (default: {_DEFAULT_FORM})",
    )
    parser.add_argument(
        "--age",
        type=int,
        default=42,
        help="Patient age exposed to initial expressions as %%patient.age (default: 42)",
    )
    parser.add_argument(
        "--list-forms",
        action="store_true",
        help="List all stored questionnaires and exit",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomise mock answers (default: on). Use --no-random for deterministic mode.",
    )
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings)

    store = QuestionnaireStore(settings.questionnaire_dir)
    store.load()

    console = Console()
    if args.list_forms:
        for form_id in store.ids():
            console.print(f"  {form_id:<30s} {store.get(form_id).title or ''}")
        sys.exit(0)

    ok = run_simulation(store, args.form, args.age, args.random, console)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
