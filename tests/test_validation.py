from datetime import datetime, timezone

import pytest

from task_api.errors import ValidationFailure
from task_api.validation import validate_task_attributes


def _errors(body, operation):
    with pytest.raises(ValidationFailure) as exc_info:
        validate_task_attributes(body, operation)
    return exc_info.value.errors


class TestCreate:
    def test_minimal_body_gets_defaults(self):
        attrs = validate_task_attributes({"name": "Buy milk", "description": ""}, "create")
        assert attrs.name == "Buy milk"
        assert attrs.description == ""
        assert attrs.is_complete is False
        assert attrs.due_date is None
        assert attrs.provided == {"name", "description", "due_date", "is_complete"}

    def test_due_date_is_decoded(self):
        attrs = validate_task_attributes(
            {"name": "n", "description": "d", "due_date": 1700000000, "is_complete": True}, "create"
        )
        assert attrs.due_date == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert attrs.is_complete is True

    def test_name_is_kept_as_sent(self):
        attrs = validate_task_attributes({"name": "  Walk dog ", "description": "d"}, "create")
        assert attrs.name == "  Walk dog "

    def test_missing_required_fields_all_reported(self):
        assert _errors({}, "create") == {"name": ["is required"], "description": ["is required"]}

    def test_explicit_null_due_date_is_allowed(self):
        attrs = validate_task_attributes({"name": "n", "description": "d", "due_date": None}, "create")
        assert attrs.due_date is None

    def test_bool_is_not_an_integer_due_date(self):
        assert _errors({"name": "n", "description": "d", "due_date": False}, "create") == {
            "due_date": ["must be an integer"]
        }

    def test_integer_is_not_a_boolean(self):
        assert _errors({"name": "n", "description": "d", "is_complete": 1}, "create") == {
            "is_complete": ["must be a boolean"]
        }

    def test_out_of_range_reported_with_other_errors(self):
        errors = _errors({"description": "d", "due_date": 10**15}, "create")
        assert errors == {"name": ["is required"], "due_date": ["is out of range"]}

    @pytest.mark.parametrize("body", [None, [], "name", 42])
    def test_non_object_body(self, body):
        assert _errors(body, "create") == {"base": ["must be a JSON object"]}


class TestUpdate:
    def test_only_present_fields_are_provided(self):
        attrs = validate_task_attributes({"is_complete": True, "unknown": 1}, "update")
        assert attrs.provided == {"is_complete"}
        assert attrs.changes() == {"is_complete": True}

    def test_empty_body_changes_nothing(self):
        assert validate_task_attributes({}, "update").changes() == {}

    def test_null_due_date_clears(self):
        attrs = validate_task_attributes({"due_date": None}, "update")
        assert attrs.changes() == {"due_date": None}

    def test_same_field_rules_as_create(self):
        errors = _errors({"name": " ", "description": 3, "due_date": 1.5}, "update")
        assert errors == {
            "name": ["can't be blank"],
            "description": ["must be a string"],
            "due_date": ["must be an integer"],
        }

    def test_null_is_rejected_for_non_nullable_fields(self):
        errors = _errors({"name": None, "description": None, "is_complete": None}, "update")
        assert set(errors) == {"name", "description", "is_complete"}
