"""Answer codec — converts raw values into typed ``Answer`` variants.

The target tag is chosen by the item type of the question being answered:

  - string, text                → value_string
  - integer                     → value_integer (leading-integer parse)
  - decimal                     → value_decimal (leading-number parse)
  - boolean                     → value_boolean (truthiness)
  - date, dateTime              → value_date / value_date_time
  - choice, coding              → value_coding when the value carries a code
  - everything else, or no type → value_string

The codec never raises on unparsable input.  A value that cannot be read
as the requested number, or a choice value without a code, falls back to
``value_string`` holding the text as given; callers that need a strict
number check the answer's tag.  A coding whose fields are not strings
likewise falls back to ``value_string``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from pydantic import ValidationError

from questionnaire_engine.models.item import Coding, InitialValue, ItemType
from questionnaire_engine.models.response import Answer

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _as_string(value: Any) -> Answer:
    if isinstance(value, bool):
        # Match the wire spelling of booleans rather than Python's.
        return Answer(value_string="true" if value else "false")
    return Answer(value_string=str(value))


def _as_integer(value: Any) -> Answer:
    if isinstance(value, bool):
        return _as_string(value)
    if isinstance(value, int):
        return Answer(value_integer=value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return _as_string(value)
        return Answer(value_integer=int(value))
    match = _INT_PREFIX.match(str(value))
    if match is None:
        logger.debug("Unparsable integer %r, keeping as string", value)
        return _as_string(value)
    return Answer(value_integer=int(match.group(1)))


def _as_decimal(value: Any) -> Answer:
    if isinstance(value, bool):
        return _as_string(value)
    if isinstance(value, (int, float)):
        return Answer(value_decimal=float(value))
    match = _FLOAT_PREFIX.match(str(value))
    if match is None:
        logger.debug("Unparsable decimal %r, keeping as string", value)
        return _as_string(value)
    return Answer(value_decimal=float(match.group(1)))


def _as_boolean(value: Any) -> Answer:
    return Answer(value_boolean=bool(value))


def _iso(value: Any) -> str:
    isoformat = getattr(value, "isoformat", None)
    return isoformat() if callable(isoformat) else str(value)


def _as_date(value: Any) -> Answer:
    return Answer(value_date=_iso(value))


def _as_date_time(value: Any) -> Answer:
    return Answer(value_date_time=_iso(value))


def _as_coding(value: Any) -> Answer:
    if isinstance(value, Coding):
        if value.code:
            return Answer(value_coding=value)
    elif isinstance(value, dict) and value.get("code"):
        try:
            return Answer(value_coding=Coding.model_validate(value))
        except ValidationError:
            logger.debug("Malformed coding %r, keeping as string", value)
    return _as_string(value)


# Every ItemType member must have an entry; a missing one is caught by the
# codec tests rather than silently defaulting.
_CONVERTERS: dict[ItemType, Callable[[Any], Answer]] = {
    ItemType.STRING: _as_string,
    ItemType.TEXT: _as_string,
    ItemType.INTEGER: _as_integer,
    ItemType.DECIMAL: _as_decimal,
    ItemType.BOOLEAN: _as_boolean,
    ItemType.DATE: _as_date,
    ItemType.DATE_TIME: _as_date_time,
    ItemType.CHOICE: _as_coding,
    ItemType.CODING: _as_coding,
    ItemType.OPEN_CHOICE: _as_string,
    ItemType.TIME: _as_string,
    ItemType.URL: _as_string,
    ItemType.ATTACHMENT: _as_string,
    ItemType.REFERENCE: _as_string,
    ItemType.QUANTITY: _as_string,
    ItemType.GROUP: _as_string,
    ItemType.DISPLAY: _as_string,
}


def convert_to_answer(value: Any, item_type: ItemType | str | None = None) -> Answer:
    """Convert a raw value into the ``Answer`` shape for *item_type*.

    An unknown or missing type converts to ``value_string``.
    """
    if item_type is None:
        return _as_string(value)
    try:
        kind = ItemType(item_type)
    except ValueError:
        logger.debug("Unknown item type %r, converting as string", item_type)
        return _as_string(value)
    return _CONVERTERS[kind](value)


def answer_from_initial(initial: InitialValue) -> Answer:
    """Copy a definition's ``initial[]`` entry into an ``Answer``, tag for tag."""
    return Answer.model_validate(initial.model_dump(exclude_none=True))
