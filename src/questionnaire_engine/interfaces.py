"""Abstract interfaces for the engine's external collaborators.

These ABCs define the contract that external implementations must fulfil.
The SDK ships no concrete implementations: a FHIRPath library adapter and
the AI suggestion client live with the application that embeds the engine.

Typical integration flow::

    evaluator: ExpressionEvaluator = MyFhirPathAdapter()
    items = populate_questionnaire(questionnaire.item, context, evaluator)

    registry = SuggestionProviderRegistry()
    registry.register("clinical-llm", MySuggestionClient(...))
    suggestions = await registry.get("clinical-llm").suggest(questionnaire, context)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from questionnaire_engine.models.item import Questionnaire
from questionnaire_engine.models.suggestion import Suggestion


class ExpressionEvaluator(ABC):
    """Interface for the path-expression (FHIRPath) evaluator.

    Only used during population and for calculated values.  Implementations
    may raise on malformed expressions; the engine catches and logs.
    """

    @abstractmethod
    def evaluate(self, expression: str, context: dict[str, Any]) -> list[Any]:
        """Evaluate *expression* against *context*.

        Parameters
        ----------
        expression:
            The expression text, e.g. ``"%patient.birthDate"``.
        context:
            Plain dict of clinical context (patient, encounter,
            observations, conditions, ...).

        Returns
        -------
        list
            All results in order; an empty list means "no value".
        """
        ...


class SuggestionProvider(ABC):
    """Interface for an AI answer-suggestion source.

    Suggestions are advisory.  The engine only requires that an applied
    suggestion is converted through the answer codec before it reaches the
    response tree (see :func:`questionnaire_engine.suggestions.apply_suggestion`).
    """

    @abstractmethod
    async def suggest(
        self, questionnaire: Questionnaire, context: dict[str, Any]
    ) -> list[Suggestion]:
        """Return suggested answers for items of *questionnaire*."""
        ...
