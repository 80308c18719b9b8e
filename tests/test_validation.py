"""ResponseValidator tests — required, max length, enablement, nesting."""

import pytest

from helpers.fakes import FakeExpressionEvaluator

from questionnaire_engine.constants import INITIAL_EXPRESSION_URL
from questionnaire_engine.models import Answer, EnableWhenCondition, Item, ResponseItem
from questionnaire_engine.population import populate_questionnaire
from questionnaire_engine.validation import ResponseValidator, validate_response


def _answered(link_id, children=None, **value):
    return ResponseItem(
        link_id=link_id,
        answer=[Answer(**value)] if value else None,
        item=children,
    )


@pytest.fixture
def validator():
    return ResponseValidator()


class TestRequired:

    def test_missing_required_item(self, validator):
        items = [Item(link_id="name", type="string", text="Name", required=True)]
        result = validator.validate(items, [])
        assert result.valid is False
        assert result.errors == ['Required field "Name" is missing']

    def test_label_falls_back_to_link_id(self, validator):
        items = [Item(link_id="name", type="string", required=True)]
        assert validator.validate(items, []).errors == ['Required field "name" is missing']

    def test_node_without_answer_counts_as_missing(self, validator):
        items = [Item(link_id="name", type="string", text="Name", required=True)]
        result = validator.validate(items, [ResponseItem(link_id="name")])
        assert result.error_count == 1

    def test_answered_required_item(self, validator):
        items = [Item(link_id="name", type="string", text="Name", required=True)]
        result = validator.validate(items, [_answered("name", value_string="Ada")])
        assert result.valid is True
        assert result.errors == []

    def test_optional_item_may_be_empty(self, validator):
        items = [Item(link_id="note", type="text")]
        assert validator.validate(items, []).valid is True


class TestEnablement:

    def _items(self):
        return [
            Item(link_id="smoker", type="boolean", text="Smoker"),
            Item(
                link_id="packs",
                type="decimal",
                text="Packs per day",
                required=True,
                enable_when=[
                    EnableWhenCondition(question="smoker", operator="=", answer_boolean=True)
                ],
            ),
        ]

    def test_disabled_required_item_not_reported(self, validator):
        tree = [_answered("smoker", value_boolean=False)]
        assert validator.validate(self._items(), tree).valid is True

    def test_enabled_required_item_reported(self, validator):
        tree = [_answered("smoker", value_boolean=True)]
        result = validator.validate(self._items(), tree)
        assert result.errors == ['Required field "Packs per day" is missing']

    def test_nested_item_enabled_by_top_level_answer(self, validator):
        """Enablement reads the whole response tree, not just the item's siblings."""
        items = [
            Item(link_id="smoker", type="boolean"),
            Item(
                link_id="group",
                type="group",
                item=[
                    Item(
                        link_id="packs",
                        type="decimal",
                        text="Packs",
                        required=True,
                        enable_when=[
                            EnableWhenCondition(
                                question="smoker", operator="=", answer_boolean=True
                            )
                        ],
                    )
                ],
            ),
        ]
        tree = [_answered("smoker", value_boolean=True), ResponseItem(link_id="group", item=[])]
        assert validator.validate(items, tree).errors == ['Required field "Packs" is missing']


class TestMaxLength:

    def test_too_long(self, validator):
        items = [Item(link_id="cc", type="text", text="Complaint", max_length=5)]
        result = validator.validate(items, [_answered("cc", value_string="toolong")])
        assert result.errors == ['Field "Complaint" exceeds maximum length of 5']

    def test_exact_length_ok(self, validator):
        items = [Item(link_id="cc", type="text", text="Complaint", max_length=5)]
        assert validator.validate(items, [_answered("cc", value_string="abcde")]).valid

    def test_non_string_answer_ignored(self, validator):
        items = [Item(link_id="n", type="integer", text="N", max_length=1)]
        assert validator.validate(items, [_answered("n", value_integer=12345)]).valid


class TestNesting:

    def test_children_checked_even_when_parent_fails(self, validator):
        items = [
            Item(
                link_id="g",
                type="group",
                text="Group",
                required=True,
                item=[Item(link_id="c", type="string", text="Child", required=True)],
            )
        ]
        result = validator.validate(items, [])
        assert result.errors == [
            'Required field "Group" is missing',
            'Required field "Child" is missing',
        ]

    def test_nested_answer_matched_under_parent(self, validator):
        items = [
            Item(
                link_id="g",
                type="group",
                item=[Item(link_id="c", type="string", text="Child", required=True)],
            )
        ]
        tree = [ResponseItem(link_id="g", item=[_answered("c", value_string="ok")])]
        assert validator.validate(items, tree).valid is True

    def test_populated_initials_validate(self):
        """A definition whose required items all carry initial values validates after population."""
        items = [
            Item.model_validate(
                {
                    "linkId": "g",
                    "type": "group",
                    "item": [
                        {
                            "linkId": "a",
                            "type": "string",
                            "required": True,
                            "initial": [{"valueString": "x"}],
                        },
                        {
                            "linkId": "b",
                            "type": "integer",
                            "required": True,
                            "initial": [{"valueInteger": 1}],
                        },
                    ],
                }
            ),
            Item.model_validate(
                {
                    "linkId": "c",
                    "type": "boolean",
                    "required": True,
                    "initial": [{"valueBoolean": False}],
                }
            ),
        ]
        result = validate_response(items, populate_questionnaire(items, {}))
        assert result.valid is True
        assert result.errors == []

    def test_empty_expression_seed_still_required(self):
        items = [
            Item.model_validate(
                {
                    "linkId": "age",
                    "type": "integer",
                    "text": "Age",
                    "required": True,
                    "extension": [
                        {
                            "url": INITIAL_EXPRESSION_URL,
                            "valueExpression": {"expression": "%patient.age"},
                        }
                    ],
                }
            )
        ]
        evaluator = FakeExpressionEvaluator({"%patient.age": [None]})
        result = validate_response(items, populate_questionnaire(items, {}, evaluator))
        assert result.errors == ['Required field "Age" is missing']
