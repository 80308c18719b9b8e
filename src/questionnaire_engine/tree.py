"""Response tree lookup and mutation.

Mutations never modify their input: ``update_answer`` returns a new list in
which only the nodes on the path to the changed item are copied.  Untouched
siblings and subtrees are shared with the input.

Insertion rule for a linkId that has never been answered: the new item is
appended at the **top level** of the tree, even when the definition places
that question inside a group.  Later updates find it wherever it is, so the
answer round-trips; only its position is flat.
"""

from __future__ import annotations

import logging

from questionnaire_engine.models.response import Answer, ResponseItem

logger = logging.getLogger(__name__)


def find_response_item(items: list[ResponseItem], link_id: str) -> ResponseItem | None:
    """Depth-first search of the whole response tree for *link_id*."""
    for item in items:
        if item.link_id == link_id:
            return item
        if item.item:
            found = find_response_item(item.item, link_id)
            if found is not None:
                return found
    return None


def _with_answer(item: ResponseItem, answer: Answer | None) -> ResponseItem:
    return item.model_copy(update={"answer": [answer] if answer is not None else None})


def _replace_nested(
    items: list[ResponseItem], link_id: str, answer: Answer | None
) -> list[ResponseItem] | None:
    """Replace the answer of an existing node; None when no node matched."""
    for index, item in enumerate(items):
        if item.link_id == link_id:
            updated = list(items)
            updated[index] = _with_answer(item, answer)
            return updated

    for index, item in enumerate(items):
        if not item.item:
            continue
        children = _replace_nested(item.item, link_id, answer)
        if children is not None:
            updated = list(items)
            updated[index] = item.model_copy(update={"item": children})
            return updated

    return None


def update_answer(
    items: list[ResponseItem], link_id: str, answer: Answer | None
) -> list[ResponseItem]:
    """Set (or clear, with ``None``) the answer of *link_id*.

    Search order: top-level siblings first, then each top-level item's
    subtree in turn.  Clearing keeps the node and drops only its answer.
    An unknown linkId with a non-None answer becomes a new top-level item;
    with ``None`` the tree is returned unchanged.
    """
    replaced = _replace_nested(items, link_id, answer)
    if replaced is not None:
        logger.debug("Updated answer for %s", link_id)
        return replaced

    if answer is None:
        return items

    logger.debug("Inserted new top-level response item %s", link_id)
    return [*items, ResponseItem(link_id=link_id, answer=[answer])]
