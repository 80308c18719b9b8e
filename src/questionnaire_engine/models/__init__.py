"""Public model re-exports for questionnaire_engine.

Consumers should import from ``questionnaire_engine.models`` rather than
reaching into sub-modules directly.
"""

# --- Definition tree ---
from questionnaire_engine.models.item import (
    AnswerOption,
    Coding,
    EnableWhenCondition,
    Expression,
    Extension,
    InitialValue,
    Item,
    ItemType,
    Questionnaire,
    duplicate_link_ids,
    find_item,
    iter_items,
)

# --- Response tree ---
from questionnaire_engine.models.response import (
    ANSWER_FIELDS,
    Answer,
    QuestionnaireResponse,
    Reference,
    ResponseItem,
    dump_items,
)

# --- Suggestions ---
from questionnaire_engine.models.suggestion import Suggestion

__all__ = [
    # Definition tree
    "AnswerOption",
    "Coding",
    "EnableWhenCondition",
    "Expression",
    "Extension",
    "InitialValue",
    "Item",
    "ItemType",
    "Questionnaire",
    "duplicate_link_ids",
    "find_item",
    "iter_items",
    # Response tree
    "ANSWER_FIELDS",
    "Answer",
    "QuestionnaireResponse",
    "Reference",
    "ResponseItem",
    "dump_items",
    # Suggestions
    "Suggestion",
]
