"""Test doubles for the engine's external collaborators."""

from typing import Any

from questionnaire_engine.interfaces import ExpressionEvaluator, SuggestionProvider
from questionnaire_engine.models import Questionnaire, Suggestion


class FakeExpressionEvaluator(ExpressionEvaluator):
    """Looks expressions up in a dict instead of parsing them.

    Values may be a list (returned as is), an exception instance (raised),
    or a callable taking the context (its return value is returned).
    Unknown expressions evaluate to ``[]``.  Every call is recorded.
    """

    def __init__(self, results: dict[str, Any] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, dict]] = []

    def evaluate(self, expression: str, context: dict[str, Any]) -> list[Any]:
        self.calls.append((expression, context))
        result = self.results.get(expression, [])
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(context)
        return result


class StaticSuggestionProvider(SuggestionProvider):
    """Returns a fixed list of suggestions and records what it was asked."""

    def __init__(self, suggestions: list[Suggestion]) -> None:
        self.suggestions = suggestions
        self.requests: list[tuple[str, dict]] = []

    async def suggest(
        self, questionnaire: Questionnaire, context: dict[str, Any]
    ) -> list[Suggestion]:
        self.requests.append((questionnaire.id, context))
        return list(self.suggestions)
