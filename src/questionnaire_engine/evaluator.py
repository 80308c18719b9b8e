"""EnableWhenEvaluator — decides whether an item is currently enabled.

Each ``enableWhen`` condition names a controlling question by linkId.  The
evaluator looks that question up anywhere in the response tree and compares
its first answer against the condition's expected value:

  - **exists**: target answered ⇔ expected boolean
  - **= / !=**: compare the first populated expected field (string,
    integer, decimal, boolean, coding.code) with the same field of the answer
  - **> < >= <=**: numeric, both sides read as integer, else decimal,
    else 0

An answer with no numeric value compares as zero, not as "incomparable":
an age question answered with free text satisfies ``age < 18``.  A target
with no answer at all fails every operator except ``exists``.

Conditions combine with ``enableBehavior``: ``any`` is OR, anything else
is AND.  The evaluator is stateless; every call re-reads the tree.
"""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable

from questionnaire_engine.models.item import EnableWhenCondition, Item
from questionnaire_engine.models.response import Answer, ResponseItem
from questionnaire_engine.tree import find_response_item

logger = logging.getLogger(__name__)

_NUMERIC_OPS: dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


class EnableWhenEvaluator:
    """Evaluates ``enableWhen`` rules against a response tree."""

    def is_enabled(self, item: Item, response_items: list[ResponseItem]) -> bool:
        """True if *item* should currently be shown and validated.

        Args:
            item: definition item carrying the conditions
            response_items: the **whole** response tree (top-level items);
                targets are found by global depth-first search

        Returns:
            True when the item has no conditions, or when they are satisfied
            under the item's ``enable_behavior``.
        """
        if not item.enable_when:
            return True

        results = [
            self._eval_condition(condition, response_items)
            for condition in item.enable_when
        ]
        if item.enable_behavior == "any":
            return any(results)
        return all(results)

    def compute_visibility(
        self, items: list[Item], response_items: list[ResponseItem]
    ) -> dict[str, bool]:
        """Visibility of every item in the definition tree, keyed by linkId.

        A disabled item hides its whole subtree, whatever the children's own
        conditions say.
        """
        visibility: dict[str, bool] = {}
        self._walk_visibility(items, response_items, True, visibility)
        return visibility

    def _walk_visibility(
        self,
        items: list[Item],
        response_items: list[ResponseItem],
        parent_enabled: bool,
        out: dict[str, bool],
    ) -> None:
        for item in items:
            enabled = parent_enabled and self.is_enabled(item, response_items)
            out[item.link_id] = enabled
            self._walk_visibility(item.item, response_items, enabled, out)

    # ------------------------------------------------------------------
    # Condition evaluation
    # ------------------------------------------------------------------

    def _eval_condition(
        self, condition: EnableWhenCondition, response_items: list[ResponseItem]
    ) -> bool:
        target = find_response_item(response_items, condition.question)
        answer = target.first_answer if target is not None else None

        if answer is None:
            if condition.operator == "exists":
                return not condition.answer_boolean
            return False

        op = condition.operator
        if op == "exists":
            return condition.answer_boolean is True
        if op == "=":
            return self._equals(answer, condition)
        if op == "!=":
            return not self._equals(answer, condition)
        if op in _NUMERIC_OPS:
            return self._compare_numeric(op, answer, condition)

        logger.warning("Unknown enableWhen operator: %s", op)
        return True

    @staticmethod
    def _equals(answer: Answer, condition: EnableWhenCondition) -> bool:
        """Compare the first populated expected field with the answer's."""
        if condition.answer_string is not None:
            return answer.value_string == condition.answer_string
        if condition.answer_integer is not None:
            return answer.value_integer == condition.answer_integer
        if condition.answer_decimal is not None:
            return answer.value_decimal == condition.answer_decimal
        if condition.answer_boolean is not None:
            return answer.value_boolean == condition.answer_boolean
        if condition.answer_coding is not None:
            code = answer.value_coding.code if answer.value_coding else None
            return code == condition.answer_coding.code
        return False

    @staticmethod
    def _compare_numeric(
        op: str, answer: Answer, condition: EnableWhenCondition
    ) -> bool:
        answer_value = _coalesce(answer.value_integer, answer.value_decimal, 0)
        expected = _coalesce(condition.answer_integer, condition.answer_decimal, 0)
        return _NUMERIC_OPS[op](answer_value, expected)


def _coalesce(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


_default_evaluator = EnableWhenEvaluator()


def evaluate_enable_when(item: Item, response_items: list[ResponseItem]) -> bool:
    """Module-level shorthand for :meth:`EnableWhenEvaluator.is_enabled`."""
    return _default_evaluator.is_enabled(item, response_items)


def compute_visibility(
    items: list[Item], response_items: list[ResponseItem]
) -> dict[str, bool]:
    """Module-level shorthand for :meth:`EnableWhenEvaluator.compute_visibility`."""
    return _default_evaluator.compute_visibility(items, response_items)
