"""questionnaire_engine — structured-questionnaire response engine.

Public API:
    FormSession            — one in-progress response to one questionnaire
    QuestionnaireStore     — loads questionnaire definitions from disk
    EnableWhenEvaluator    — per-item conditional visibility
    ResponseValidator      — required / max-length checks at submit time
    ValidationResult       — {valid, errors} returned by the validator

Functions:
    convert_to_answer      — raw value → typed Answer, by item type
    find_response_item     — depth-first lookup in a response tree
    update_answer          — set or clear an answer, returning a new tree
    evaluate_enable_when   — is one item enabled right now
    compute_visibility     — visibility of every item in a definition
    populate_questionnaire — seed a response tree from initial values/context
    calculate_value        — evaluate a calculated expression over answers
    validate_response      — validate a response tree against its definition
    create_questionnaire_response — empty in-progress response envelope

External collaborator interfaces:
    ExpressionEvaluator    — ABC for the path-expression (FHIRPath) evaluator
    SuggestionProvider     — ABC for AI answer suggestions
    SuggestionProviderRegistry — caller-owned registry of named providers
"""

from questionnaire_engine.codec import convert_to_answer
from questionnaire_engine.evaluator import (
    EnableWhenEvaluator,
    compute_visibility,
    evaluate_enable_when,
)
from questionnaire_engine.interfaces import ExpressionEvaluator, SuggestionProvider
from questionnaire_engine.population import calculate_value, populate_questionnaire
from questionnaire_engine.session import FormSession, create_questionnaire_response
from questionnaire_engine.store import QuestionnaireStore
from questionnaire_engine.suggestions import SuggestionProviderRegistry, apply_suggestion
from questionnaire_engine.tree import find_response_item, update_answer
from questionnaire_engine.validation import (
    ResponseValidator,
    ValidationResult,
    validate_response,
)

__all__ = [
    # Session & store
    "FormSession",
    "QuestionnaireStore",
    "create_questionnaire_response",
    # Components
    "EnableWhenEvaluator",
    "ResponseValidator",
    "ValidationResult",
    "apply_suggestion",
    "calculate_value",
    "compute_visibility",
    "convert_to_answer",
    "evaluate_enable_when",
    "find_response_item",
    "populate_questionnaire",
    "update_answer",
    "validate_response",
    # Collaborator interfaces
    "ExpressionEvaluator",
    "SuggestionProvider",
    "SuggestionProviderRegistry",
]
