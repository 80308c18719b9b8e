"""FormSession — one in-progress response to one questionnaire.

Ties the engine components into the edit loop a form UI runs:

    session = FormSession.start(questionnaire, subject, context=ctx, evaluator=fhirpath)

    for item in questionnaire.item:           # render
        if session.is_enabled(item.link_id):
            widget(item, session.answer_for(item.link_id))

    session.set_answer("q2", 5)               # every user edit
    session.clear_answer("q2")

    result = session.submit()                 # validate, then mark completed
    if not result.valid:
        show(result.errors)

Every edit replaces the session's response tree with a new one; visibility
and validation always read the tree as it is at the time of the call.  One
session serves one editor; the caller owns any locking.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from questionnaire_engine.codec import convert_to_answer
from questionnaire_engine.config import EngineSettings, load_settings
from questionnaire_engine.evaluator import EnableWhenEvaluator
from questionnaire_engine.interfaces import ExpressionEvaluator, SuggestionProvider
from questionnaire_engine.models.item import Item, Questionnaire, find_item, iter_items
from questionnaire_engine.models.response import (
    Answer,
    QuestionnaireResponse,
    Reference,
    ResponseItem,
)
from questionnaire_engine.models.suggestion import Suggestion
from questionnaire_engine.population import calculate_value, populate_questionnaire
from questionnaire_engine.suggestions import apply_suggestion, filter_suggestions
from questionnaire_engine.tree import find_response_item, update_answer
from questionnaire_engine.validation import ResponseValidator, ValidationResult

logger = logging.getLogger(__name__)


def create_questionnaire_response(
    questionnaire: Questionnaire,
    subject: Reference,
    encounter: Reference | None = None,
    author: Reference | None = None,
) -> QuestionnaireResponse:
    """Create an empty ``in-progress`` response to *questionnaire*."""
    return QuestionnaireResponse(
        id=str(uuid.uuid4()),
        questionnaire=f"Questionnaire/{questionnaire.id}",
        status="in-progress",
        subject=subject,
        encounter=encounter,
        author=author,
        item=[],
    )


class FormSession:
    """Holds a questionnaire definition and its mutable response.

    Args:
        questionnaire: the immutable form definition
        response: the response to edit (adopted as is)
        context: clinical context for calculated expressions
        evaluator: optional path-expression evaluator; without one,
            calculated expressions are not recomputed
        settings: engine settings; defaults to :func:`load_settings`
    """

    def __init__(
        self,
        questionnaire: Questionnaire,
        response: QuestionnaireResponse,
        *,
        context: dict[str, Any] | None = None,
        evaluator: ExpressionEvaluator | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._questionnaire = questionnaire
        self._response = response
        self._context = context or {}
        self._evaluator = evaluator
        self._settings = settings or load_settings()
        self._visibility = EnableWhenEvaluator()
        self._validator = ResponseValidator(self._visibility)
        self._suggestions: dict[str, Suggestion] = {}

    @classmethod
    def start(
        cls,
        questionnaire: Questionnaire,
        subject: Reference,
        *,
        context: dict[str, Any] | None = None,
        evaluator: ExpressionEvaluator | None = None,
        prior: QuestionnaireResponse | None = None,
        encounter: Reference | None = None,
        author: Reference | None = None,
        settings: EngineSettings | None = None,
    ) -> FormSession:
        """Open a session, either resuming *prior* or populating a new response.

        A new response is populated once from the definition's initial values
        and, when an evaluator is supplied, its initial expressions.  The
        populated tree carries a node for every definition item.
        """
        if prior is not None:
            response = prior.model_copy(deep=True)
        else:
            response = create_questionnaire_response(
                questionnaire, subject, encounter=encounter, author=author
            )
            response.item = populate_questionnaire(
                questionnaire.item, context or {}, evaluator
            )

        session = cls(
            questionnaire,
            response,
            context=context,
            evaluator=evaluator,
            settings=settings,
        )
        session.recalculate()
        return session

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def questionnaire(self) -> Questionnaire:
        return self._questionnaire

    @property
    def response(self) -> QuestionnaireResponse:
        return self._response

    @property
    def items(self) -> list[ResponseItem]:
        """The current top-level response items."""
        return self._response.item

    def answer_for(self, link_id: str) -> Answer | None:
        """Current answer of *link_id*, or None when unanswered."""
        found = find_response_item(self._response.item, link_id)
        return found.first_answer if found is not None else None

    def is_enabled(self, link_id: str) -> bool:
        """Whether *link_id* is enabled by its own conditions right now."""
        return self._visibility.is_enabled(self._item(link_id), self._response.item)

    def visibility(self) -> dict[str, bool]:
        """Visibility of every definition item, recomputed from scratch."""
        return self._visibility.compute_visibility(
            self._questionnaire.item, self._response.item
        )

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_answer(self, link_id: str, value: Any) -> Answer | None:
        """Convert *value* by the item's type and store it.

        An ``Answer`` is stored unchanged; ``None`` clears the answer.
        Raises ``KeyError`` if *link_id* is not in the definition.
        """
        item = self._item(link_id)
        if value is None or isinstance(value, Answer):
            answer = value
        else:
            answer = convert_to_answer(value, item.type)
        self._replace_items(update_answer(self._response.item, link_id, answer))
        self.recalculate()
        return answer

    def clear_answer(self, link_id: str) -> None:
        """Remove the answer of *link_id*, keeping its node."""
        self.set_answer(link_id, None)

    def recalculate(self) -> None:
        """Recompute every item that carries a calculated expression."""
        if self._evaluator is None:
            return
        for item in iter_items(self._questionnaire.item):
            expression = item.calculated_expression
            if expression is None:
                continue
            value = calculate_value(
                self._evaluator, expression, self._response.item, self._context
            )
            if value is None:
                continue
            answer = convert_to_answer(value, item.type)
            if answer != self.answer_for(item.link_id):
                self._replace_items(
                    update_answer(self._response.item, item.link_id, answer)
                )

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    async def fetch_suggestions(self, provider: SuggestionProvider) -> list[Suggestion]:
        """Ask *provider* for suggestions and keep those above the threshold."""
        raw = await provider.suggest(self._questionnaire, self._context)
        kept = filter_suggestions(raw, self._settings.suggestion_min_confidence)
        self._suggestions = {s.link_id: s for s in kept}
        logger.info("Kept %d of %d suggestions", len(kept), len(raw))
        return kept

    def suggestion_for(self, link_id: str) -> Suggestion | None:
        return self._suggestions.get(link_id)

    def apply_suggestion(self, link_id: str) -> Answer | None:
        """Write the stored suggestion for *link_id* into the response.

        Raises ``KeyError`` if there is no suggestion for *link_id*.
        """
        suggestion = self._suggestions[link_id]
        self._replace_items(
            apply_suggestion(self._questionnaire.item, self._response.item, suggestion)
        )
        self.recalculate()
        return self.answer_for(link_id)

    # ------------------------------------------------------------------
    # Save / submit
    # ------------------------------------------------------------------

    def validate(self) -> ValidationResult:
        return self._validator.validate(self._questionnaire.item, self._response.item)

    def save_draft(self) -> QuestionnaireResponse:
        """Snapshot of the response with status ``in-progress``."""
        return self._response.model_copy(update={"status": "in-progress"}, deep=True)

    def submit(self) -> ValidationResult:
        """Validate and, if valid, mark the response ``completed``.

        An invalid response keeps its status; the caller shows the errors.
        """
        result = self.validate()
        if result.valid:
            self._response = self._response.model_copy(update={"status": "completed"})
            logger.info("Response %s completed", self._response.id)
        else:
            logger.info(
                "Response %s failed validation with %d errors",
                self._response.id,
                result.error_count,
            )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _item(self, link_id: str) -> Item:
        item = find_item(self._questionnaire.item, link_id)
        if item is None:
            raise KeyError(
                f"linkId {link_id!r} not in questionnaire {self._questionnaire.id!r}"
            )
        return item

    def _replace_items(self, items: list[ResponseItem]) -> None:
        self._response = self._response.model_copy(update={"item": items})
