"""Definition-tree models for structured questionnaires.

An ``Item`` is one node of a form definition: a question, a display block,
or a group of nested items.  Definitions are loaded once per form and never
mutated, so every model here is frozen.

Field names are snake_case in Python and camelCase on the wire
(``link_id`` <-> ``linkId``), matching the FHIR ``Questionnaire`` JSON shape.
Unknown keys are ignored so full FHIR resources load without pre-filtering.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from questionnaire_engine.constants import (
    CALCULATED_EXPRESSION_URL,
    INITIAL_EXPRESSION_URL,
)


class FhirModel(BaseModel):
    """Base for all wire-shaped models: camelCase aliases, extra keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class DefinitionModel(FhirModel):
    """Base for immutable definition-tree models."""

    model_config = ConfigDict(frozen=True)


class ItemType(str, Enum):
    """Closed set of item type tags.

    ``coding`` is not a FHIR item type but is accepted as an explicit target
    for coded answers (the codec treats it like ``choice``).
    """

    GROUP = "group"
    DISPLAY = "display"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"
    INTEGER = "integer"
    DATE = "date"
    DATE_TIME = "dateTime"
    TIME = "time"
    STRING = "string"
    TEXT = "text"
    URL = "url"
    CHOICE = "choice"
    OPEN_CHOICE = "open-choice"
    ATTACHMENT = "attachment"
    REFERENCE = "reference"
    QUANTITY = "quantity"
    CODING = "coding"


class Coding(DefinitionModel):
    """A coded value: ``{system, code, display}``."""

    system: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


class AnswerOption(DefinitionModel):
    """One permitted answer of a choice item: a coding or a plain string."""

    value_coding: Optional[Coding] = None
    value_string: Optional[str] = None
    value_integer: Optional[int] = None


class InitialValue(DefinitionModel):
    """A seed value declared on the definition (``item.initial[]``)."""

    value_string: Optional[str] = None
    value_integer: Optional[int] = None
    value_decimal: Optional[float] = None
    value_boolean: Optional[bool] = None
    value_date: Optional[str] = None
    value_date_time: Optional[str] = None
    value_coding: Optional[Coding] = None


class Expression(DefinitionModel):
    """A path expression (FHIRPath by default) attached via extension."""

    language: str = "text/fhirpath"
    expression: Optional[str] = None
    name: Optional[str] = None


class Extension(DefinitionModel):
    """Generic FHIR extension; only expression-valued ones are interpreted."""

    url: str
    value_expression: Optional[Expression] = None


class EnableWhenCondition(DefinitionModel):
    """A single visibility condition referencing another item by linkId.

    Exactly one ``answer*`` field carries the expected value.  For the
    ``exists`` operator that field is ``answer_boolean``.
    """

    question: str
    operator: Literal["exists", "=", "!=", ">", "<", ">=", "<="]
    answer_string: Optional[str] = None
    answer_integer: Optional[int] = None
    answer_decimal: Optional[float] = None
    answer_boolean: Optional[bool] = None
    answer_coding: Optional[Coding] = None

    @model_validator(mode="after")
    def _exactly_one_answer(self):
        populated = [
            name
            for name in (
                "answer_string",
                "answer_integer",
                "answer_decimal",
                "answer_boolean",
                "answer_coding",
            )
            if getattr(self, name) is not None
        ]
        if len(populated) != 1:
            raise ValueError(
                f"enableWhen on {self.question!r} needs exactly one expected "
                f"value, got {populated or 'none'}"
            )
        return self


class Item(DefinitionModel):
    """One node of the definition tree.

    ``link_id`` must be unique across the whole tree, not just among
    siblings: conditions and lookups search globally.
    """

    link_id: str
    type: ItemType
    text: Optional[str] = None
    required: bool = False
    max_length: Optional[int] = None
    answer_option: list[AnswerOption] = Field(default_factory=list)
    enable_when: list[EnableWhenCondition] = Field(default_factory=list)
    enable_behavior: Literal["all", "any"] = "all"
    initial: list[InitialValue] = Field(default_factory=list)
    extension: list[Extension] = Field(default_factory=list)
    item: list[Item] = Field(default_factory=list)

    def _expression(self, url: str) -> Optional[str]:
        for ext in self.extension:
            if ext.url == url and ext.value_expression is not None:
                return ext.value_expression.expression or None
        return None

    @property
    def initial_expression(self) -> Optional[str]:
        """Expression text of the SDC initialExpression extension, if any."""
        return self._expression(INITIAL_EXPRESSION_URL)

    @property
    def calculated_expression(self) -> Optional[str]:
        """Expression text of the SDC calculatedExpression extension, if any."""
        return self._expression(CALCULATED_EXPRESSION_URL)


class Questionnaire(DefinitionModel):
    """A form definition: metadata plus the top-level items."""

    resource_type: Literal["Questionnaire"] = "Questionnaire"
    id: str
    url: Optional[str] = None
    title: Optional[str] = None
    status: str = "active"
    item: list[Item] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------

def iter_items(items: list[Item]) -> Iterator[Item]:
    """Yield every item of the tree, depth-first, parents before children."""
    for item in items:
        yield item
        yield from iter_items(item.item)


def find_item(items: list[Item], link_id: str) -> Item | None:
    """Global depth-first lookup of a definition item by linkId."""
    for item in iter_items(items):
        if item.link_id == link_id:
            return item
    return None


def duplicate_link_ids(items: list[Item]) -> list[str]:
    """Return linkIds that occur more than once anywhere in the tree."""
    seen: set[str] = set()
    dupes: list[str] = []
    for item in iter_items(items):
        if item.link_id in seen and item.link_id not in dupes:
            dupes.append(item.link_id)
        seen.add(item.link_id)
    return dupes
