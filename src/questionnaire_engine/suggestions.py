"""AI suggestion plumbing — provider registry and suggestion application.

Providers are looked up by name in a :class:`SuggestionProviderRegistry`
that the caller creates and passes around; there is no module-level
registry.
"""

from __future__ import annotations

import logging

from questionnaire_engine.codec import convert_to_answer
from questionnaire_engine.interfaces import SuggestionProvider
from questionnaire_engine.models.item import Item, ItemType, find_item
from questionnaire_engine.models.response import ResponseItem
from questionnaire_engine.models.suggestion import Suggestion
from questionnaire_engine.tree import update_answer

logger = logging.getLogger(__name__)


class SuggestionProviderRegistry:
    """Named collection of suggestion providers.

    Usage::

        registry = SuggestionProviderRegistry()
        registry.register("scribe", ScribeSuggestionClient(...))
        provider = registry.get("scribe")
    """

    def __init__(self) -> None:
        self._providers: dict[str, SuggestionProvider] = {}

    def register(self, name: str, provider: SuggestionProvider) -> None:
        """Register *provider* under *name*, replacing any previous one."""
        if name in self._providers:
            logger.info("Replacing suggestion provider %r", name)
        self._providers[name] = provider

    def get(self, name: str) -> SuggestionProvider:
        """Return the provider registered under *name*.

        Raises ``KeyError`` listing the known names if *name* is unknown.
        """
        try:
            return self._providers[name]
        except KeyError:
            raise KeyError(
                f"Unknown suggestion provider {name!r}; known: {sorted(self._providers)}"
            ) from None

    def names(self) -> list[str]:
        """Registered provider names, sorted."""
        return sorted(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)


def filter_suggestions(
    suggestions: list[Suggestion], min_confidence: float
) -> list[Suggestion]:
    """Drop suggestions below *min_confidence*, keeping the best one per linkId."""
    best: dict[str, Suggestion] = {}
    for suggestion in suggestions:
        if suggestion.confidence < min_confidence:
            continue
        current = best.get(suggestion.link_id)
        if current is None or suggestion.confidence > current.confidence:
            best[suggestion.link_id] = suggestion
    return list(best.values())


def apply_suggestion(
    items: list[Item],
    response_items: list[ResponseItem],
    suggestion: Suggestion,
) -> list[ResponseItem]:
    """Write *suggestion* into the response tree through the codec.

    The target item's type picks the answer shape; a linkId missing from the
    definition is written as a string answer.
    """
    item = find_item(items, suggestion.link_id)
    item_type = item.type if item is not None else ItemType.STRING
    if item is None:
        logger.warning("Suggestion for unknown linkId %s, applying as string", suggestion.link_id)
    answer = convert_to_answer(suggestion.suggested_value, item_type)
    return update_answer(response_items, suggestion.link_id, answer)
