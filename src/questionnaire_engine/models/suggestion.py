"""Suggestion model — a proposed answer from an external suggestion source."""

from typing import Any

from pydantic import Field

from questionnaire_engine.models.item import FhirModel


class Suggestion(FhirModel):
    """A proposed value for one item, with the source's confidence.

    ``suggested_value`` is raw: it must go through the answer codec before
    it is written into a response tree.
    """

    link_id: str
    suggested_value: Any
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
