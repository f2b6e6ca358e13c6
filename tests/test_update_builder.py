# tests/test_update_builder.py
import pytest

from backoffice.common.errors import ValidationError
from backoffice.composite.update_builder import UpdateBuilder
from backoffice.db import tables


def _builder():
    return UpdateBuilder(
        tables.checkouts,
        key="checkout_id",
        allowed=("first_name", "email"),
    )


def test_assignments_keeps_allowed_fields():
    assert _builder().assignments({"first_name": "Asha"}) == {"first_name": "Asha"}


def test_unknown_field_is_rejected():
    """(error) fields outside the allowlist are a ValidationError, not ignored"""
    with pytest.raises(ValidationError) as exc:
        _builder().assignments({"first_name": "Asha", "payment_status": "completed"})
    assert "payment_status" in str(exc.value)


def test_empty_update_is_rejected():
    with pytest.raises(ValidationError):
        _builder().assignments({})


def test_build_sets_fields_and_refreshes_updated_at():
    stmt = _builder().build(7, {"email": "a@example.com"})
    compiled = stmt.compile()
    assert "updated_at" in str(compiled)
    assert compiled.params["email"] == "a@example.com"
    assert 7 in compiled.params.values()


def test_constructor_rejects_bad_columns():
    with pytest.raises(ValueError):
        UpdateBuilder(tables.checkouts, key="checkout_id", allowed=("no_such_column",))
    with pytest.raises(ValueError):
        UpdateBuilder(tables.checkouts, key="checkout_id", allowed=("checkout_id",))
