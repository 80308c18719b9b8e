"""Initial population — seeds a response tree from the definition and context.

Population runs once, before the first render.  Every definition node
produces exactly one ``ResponseItem`` (``{linkId, text}`` at minimum), so a
freshly populated tree mirrors the full shape of the definition.  Later
answer-driven mutation only materialises answered nodes.

Seed sources, in order (a later source overwrites an earlier one):

  1. ``item.initial[]``: copied tag for tag
  2. the SDC ``initialExpression`` extension: evaluated against the
     context by the injected :class:`ExpressionEvaluator`; the first result
     is converted through the codec using the item's type

Expression failures are logged and leave the item without a seed.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from questionnaire_engine.codec import answer_from_initial, convert_to_answer
from questionnaire_engine.constants import RESPONSE_CONTEXT_KEY
from questionnaire_engine.interfaces import ExpressionEvaluator
from questionnaire_engine.models.item import Item
from questionnaire_engine.models.response import Answer, ResponseItem, dump_items

logger = logging.getLogger(__name__)


def evaluate_expression(
    evaluator: ExpressionEvaluator, expression: str, context: dict[str, Any]
) -> list[Any]:
    """Run the evaluator, normalising its result to a list.

    A scalar result is wrapped; ``None`` entries are dropped, so a ``None``
    result becomes ``[]``.  Exceptions are logged and treated as "no result".
    """
    try:
        result = evaluator.evaluate(expression, context)
    except Exception:
        logger.exception("Expression evaluation failed: %s", expression)
        return []
    if not isinstance(result, (list, tuple)):
        result = [result]
    return [value for value in result if value is not None]


def populate_questionnaire(
    items: list[Item],
    context: dict[str, Any],
    evaluator: ExpressionEvaluator | None = None,
) -> list[ResponseItem]:
    """Build the initial response tree for *items*.

    Args:
        items: top-level definition items
        context: clinical context passed to initial expressions
        evaluator: path-expression evaluator; when ``None``, expression
            annotations are skipped with a warning

    Returns:
        One ``ResponseItem`` per definition node, nested like the definition.
    """
    return [_populate_item(item, context, evaluator) for item in items]


def _populate_item(
    item: Item, context: dict[str, Any], evaluator: ExpressionEvaluator | None
) -> ResponseItem:
    answers = _initial_answers(item)

    expression = item.initial_expression
    if expression is not None:
        seeded = _expression_answer(item, expression, context, evaluator)
        if seeded is not None:
            answers = [seeded]

    children = [_populate_item(child, context, evaluator) for child in item.item]

    return ResponseItem(
        link_id=item.link_id,
        text=item.text,
        answer=answers or None,
        item=children or None,
    )


def _initial_answers(item: Item) -> list[Answer]:
    answers: list[Answer] = []
    for initial in item.initial:
        try:
            answers.append(answer_from_initial(initial))
        except ValidationError as exc:
            logger.warning("Skipping invalid initial value on %s: %s", item.link_id, exc)
    return answers


def _expression_answer(
    item: Item,
    expression: str,
    context: dict[str, Any],
    evaluator: ExpressionEvaluator | None,
) -> Answer | None:
    if evaluator is None:
        logger.warning(
            "Item %s has an initial expression but no evaluator was supplied",
            item.link_id,
        )
        return None

    results = evaluate_expression(evaluator, expression, context)
    if not results:
        return None
    try:
        return convert_to_answer(results[0], item.type)
    except ValidationError as exc:
        logger.warning(
            "Discarding initial expression result for %s: %s", item.link_id, exc
        )
        return None


def calculate_value(
    evaluator: ExpressionEvaluator,
    expression: str,
    response_items: list[ResponseItem],
    context: dict[str, Any],
) -> Any:
    """Evaluate a calculated expression over the context plus current answers.

    The response tree is exposed to the expression as
    ``QuestionnaireResponse.item`` in its JSON wire shape.  Returns the first
    result, or ``None``.
    """
    scope = {**context, RESPONSE_CONTEXT_KEY: {"item": dump_items(response_items)}}
    results = evaluate_expression(evaluator, expression, scope)
    return results[0] if results else None
