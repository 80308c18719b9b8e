"""Questionnaire engine constants shared across the SDK.

These values are referenced by the population engine, the store, and the
form session.  The extension URLs mirror the HL7 SDC implementation guide.
"""

# SDC extension carrying an expression that seeds an item's first answer.
INITIAL_EXPRESSION_URL = (
    "http://hl7.org/fhir/uv/sdc/StructureDefinition/sdc-questionnaire-initialExpression"
)

# SDC extension carrying an expression recomputed from the current answers.
CALCULATED_EXPRESSION_URL = (
    "http://hl7.org/fhir/uv/sdc/StructureDefinition/sdc-questionnaire-calculatedExpression"
)

# Key under which the in-progress response is exposed to calculated expressions.
RESPONSE_CONTEXT_KEY = "QuestionnaireResponse"

# QuestionnaireResponse lifecycle statuses (FHIR R4).
RESPONSE_STATUSES: tuple[str, ...] = (
    "in-progress",
    "completed",
    "amended",
    "entered-in-error",
    "stopped",
)

# File suffixes the store will parse as questionnaire definitions.
DEFINITION_SUFFIXES: tuple[str, ...] = (".yaml", ".yml", ".json")
