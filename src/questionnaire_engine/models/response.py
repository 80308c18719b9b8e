"""Response-tree models — the in-progress answers to a questionnaire.

The response tree mirrors the definition tree only where answers or
structure exist: unanswered branches may be absent entirely.  Each
``ResponseItem`` stores at most one ``Answer`` (the wire shape is still a
list, as in FHIR).

``Answer`` is a tagged union flattened into optional fields; exactly one
``value_*`` field is populated per instance.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import Field, model_validator

from questionnaire_engine.models.item import Coding, FhirModel

# Ordered so the first populated tag wins when reading an answer's value.
ANSWER_FIELDS: tuple[str, ...] = (
    "value_string",
    "value_integer",
    "value_decimal",
    "value_boolean",
    "value_date",
    "value_date_time",
    "value_coding",
)


class Answer(FhirModel):
    """A single typed answer value."""

    value_string: Optional[str] = None
    value_integer: Optional[int] = None
    value_decimal: Optional[float] = None
    value_boolean: Optional[bool] = None
    value_date: Optional[str] = None
    value_date_time: Optional[str] = None
    value_coding: Optional[Coding] = None

    @model_validator(mode="after")
    def _exactly_one_value(self):
        populated = [name for name in ANSWER_FIELDS if getattr(self, name) is not None]
        if len(populated) != 1:
            raise ValueError(
                f"Answer needs exactly one value field, got {populated or 'none'}"
            )
        return self

    @property
    def tag(self) -> str:
        """Name of the populated field (e.g. ``"value_integer"``)."""
        for name in ANSWER_FIELDS:
            if getattr(self, name) is not None:
                return name
        raise AssertionError("unreachable: validator guarantees one tag")

    @property
    def value(self) -> Any:
        """The populated value, whatever its tag."""
        return getattr(self, self.tag)


class ResponseItem(FhirModel):
    """One node of the response tree."""

    link_id: str
    text: Optional[str] = None
    answer: Optional[list[Answer]] = None
    item: Optional[list[ResponseItem]] = None

    @property
    def first_answer(self) -> Answer | None:
        """The item's answer, or None when unanswered."""
        return self.answer[0] if self.answer else None


class Reference(FhirModel):
    """A FHIR reference, e.g. ``{"reference": "Patient/123"}``."""

    reference: Optional[str] = None
    display: Optional[str] = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class QuestionnaireResponse(FhirModel):
    """Envelope around a response tree: subject, status, and timestamps."""

    resource_type: Literal["QuestionnaireResponse"] = "QuestionnaireResponse"
    id: Optional[str] = None
    questionnaire: Optional[str] = None
    status: Literal[
        "in-progress", "completed", "amended", "entered-in-error", "stopped"
    ] = "in-progress"
    subject: Optional[Reference] = None
    encounter: Optional[Reference] = None
    author: Optional[Reference] = None
    authored: str = Field(default_factory=_now_iso)
    item: list[ResponseItem] = Field(default_factory=list)


def dump_items(items: list[ResponseItem]) -> list[dict[str, Any]]:
    """Serialise response items to their JSON wire shape."""
    return [i.model_dump(by_alias=True, exclude_none=True) for i in items]
