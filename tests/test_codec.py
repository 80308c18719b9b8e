"""Answer codec unit tests — one class per target tag.

Conversion reference (from codec.convert_to_answer):
    string, text        — value_string (str())
    integer             — value_integer (leading-integer parse, float truncation)
    decimal             — value_decimal (leading-number parse)
    boolean             — value_boolean (truthiness)
    date, dateTime      — value_date / value_date_time (isoformat or str)
    choice, coding      — value_coding when the value carries a code
    anything else       — value_string
"""

import math
from datetime import date, datetime, timezone

import pytest

from questionnaire_engine.codec import _CONVERTERS, answer_from_initial, convert_to_answer
from questionnaire_engine.models import Coding, InitialValue, ItemType


class TestDispatchTable:
    """The type tag is closed: every ItemType has a converter."""

    def test_every_item_type_has_a_converter(self):
        missing = [t for t in ItemType if t not in _CONVERTERS]
        assert missing == [], f"ItemType members without a converter: {missing}"


class TestStrings:

    @pytest.mark.parametrize("item_type", ["string", "text"])
    def test_string_types(self, item_type):
        assert convert_to_answer("hello", item_type).value_string == "hello"

    def test_non_string_is_stringified(self):
        assert convert_to_answer(42, "string").value_string == "42"

    def test_unspecified_type_defaults_to_string(self):
        answer = convert_to_answer(3.5)
        assert answer.tag == "value_string"
        assert answer.value_string == "3.5"

    def test_unknown_type_defaults_to_string(self):
        assert convert_to_answer(7, "signature").value_string == "7"

    @pytest.mark.parametrize("item_type", ["url", "time", "open-choice", "quantity"])
    def test_types_without_own_tag_use_string(self, item_type):
        assert convert_to_answer("x", item_type).tag == "value_string"


class TestNumbers:

    def test_integer_from_int(self):
        assert convert_to_answer(5, "integer").value_integer == 5

    def test_integer_from_string(self):
        assert convert_to_answer("12", "integer").value_integer == 12

    def test_integer_leading_digits(self):
        """Trailing junk is ignored, like a leading-integer parse."""
        assert convert_to_answer("12 years", "integer").value_integer == 12

    def test_integer_from_float_truncates(self):
        assert convert_to_answer(3.9, "integer").value_integer == 3

    def test_unparsable_integer_does_not_raise(self):
        answer = convert_to_answer("abc", "integer")
        assert answer.tag == "value_string"
        assert answer.value_string == "abc"

    def test_decimal_from_string(self):
        assert convert_to_answer("1.5", "decimal").value_decimal == 1.5

    def test_decimal_from_int(self):
        answer = convert_to_answer(2, "decimal")
        assert answer.value_decimal == 2.0
        assert isinstance(answer.value_decimal, float)

    def test_decimal_exponent(self):
        assert convert_to_answer("1e3", "decimal").value_decimal == 1000.0

    def test_unparsable_decimal_does_not_raise(self):
        assert convert_to_answer("n/a", "decimal").tag == "value_string"

    def test_nan_integer_kept_as_string(self):
        assert convert_to_answer(math.nan, "integer").tag == "value_string"


class TestBooleanAndDates:

    @pytest.mark.parametrize("value,expected", [(True, True), (False, False), (1, True), (0, False), ("", False)])
    def test_boolean_truthiness(self, value, expected):
        assert convert_to_answer(value, "boolean").value_boolean is expected

    def test_date_passthrough(self):
        assert convert_to_answer("2024-01-31", "date").value_date == "2024-01-31"

    def test_date_object(self):
        assert convert_to_answer(date(2024, 1, 31), "date").value_date == "2024-01-31"

    def test_datetime_object(self):
        value = datetime(2024, 1, 31, 8, 30, tzinfo=timezone.utc)
        answer = convert_to_answer(value, "dateTime")
        assert answer.value_date_time == "2024-01-31T08:30:00+00:00"


class TestCoding:

    def test_dict_with_code(self):
        answer = convert_to_answer({"code": "yes", "display": "Yes"}, "choice")
        assert answer.value_coding == Coding(code="yes", display="Yes")

    def test_coding_model(self):
        coding = Coding(system="http://loinc.org", code="LA33-6")
        assert convert_to_answer(coding, "coding").value_coding == coding

    def test_dict_without_code_falls_through(self):
        answer = convert_to_answer({"display": "Yes"}, "choice")
        assert answer.tag == "value_string"

    def test_plain_string_choice(self):
        assert convert_to_answer("other", "choice").value_string == "other"

    @pytest.mark.parametrize("item_type", ["choice", "coding"])
    def test_non_string_code_falls_back_to_string(self, item_type):
        answer = convert_to_answer({"code": 123, "display": "x"}, item_type)
        assert answer.tag == "value_string"
        assert answer.value_coding is None


class TestAnswerFromInitial:

    def test_copies_tag(self):
        answer = answer_from_initial(InitialValue(value_integer=3))
        assert answer.value_integer == 3
        assert answer.tag == "value_integer"

    def test_copies_coding(self):
        answer = answer_from_initial(InitialValue(value_coding=Coding(code="a")))
        assert answer.value_coding.code == "a"
