"""Response validation — completeness and length checks before submission.

Errors are human-readable strings shown to the user verbatim; the caller
decides whether they block submission.
"""

from __future__ import annotations

from pydantic import BaseModel

from questionnaire_engine.evaluator import EnableWhenEvaluator
from questionnaire_engine.models.item import Item
from questionnaire_engine.models.response import ResponseItem


class ValidationResult(BaseModel):
    """Result of validating a response tree against its definition."""

    valid: bool
    errors: list[str]

    @property
    def error_count(self) -> int:
        """Number of validation errors."""
        return len(self.errors)


class ResponseValidator:
    """Walks the definition and response trees together.

    Checks:
    1. Required: a required, currently enabled item has an answer
    2. Length: string answers do not exceed ``max_length``

    Response items are matched to definition items by linkId among the
    children of the matching parent.  Enablement is evaluated against the
    whole response tree.
    """

    def __init__(self, evaluator: EnableWhenEvaluator | None = None) -> None:
        self._evaluator = evaluator or EnableWhenEvaluator()

    def validate(
        self, items: list[Item], response_items: list[ResponseItem]
    ) -> ValidationResult:
        """Validate *response_items* against the definition *items*."""
        errors: list[str] = []
        for item in items:
            self._validate_item(item, response_items, response_items, errors)
        return ValidationResult(valid=len(errors) == 0, errors=errors)

    def _validate_item(
        self,
        item: Item,
        siblings: list[ResponseItem],
        root: list[ResponseItem],
        errors: list[str],
    ) -> None:
        response_item = next((r for r in siblings if r.link_id == item.link_id), None)
        answers = response_item.answer if response_item is not None else None

        if item.required and not answers:
            if self._evaluator.is_enabled(item, root):
                errors.append(f'Required field "{item.text or item.link_id}" is missing')

        if item.max_length is not None and answers:
            for answer in answers:
                if answer.value_string and len(answer.value_string) > item.max_length:
                    errors.append(
                        f'Field "{item.text or item.link_id}" exceeds maximum length of {item.max_length}'
                    )

        children = (response_item.item if response_item is not None else None) or []
        for child in item.item:
            self._validate_item(child, children, root, errors)


def validate_response(
    items: list[Item], response_items: list[ResponseItem]
) -> ValidationResult:
    """Validate with a default :class:`ResponseValidator`."""
    return ResponseValidator().validate(items, response_items)
