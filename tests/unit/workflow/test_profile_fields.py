"""Tests for profile update value coercion."""

import pytest

from onboarding.core.workflow.errors import ValidationError
from onboarding.core.workflow.profile import PROFILE_UPDATABLE_FIELDS, coerce_profile_value
from onboarding.db.models import SupplierApplication

TEXT_FIELDS = ["supplier_name", "company_phone", "contact_name"]
EMAIL_FIELDS = ["company_email", "contact_email"]


def column_length(field):
    return SupplierApplication.__table__.c[field].type.length


def test_every_field_is_an_application_column():
    columns = SupplierApplication.__table__.c
    assert all(field in columns for field in PROFILE_UPDATABLE_FIELDS)


@pytest.mark.parametrize("field", TEXT_FIELDS)
def test_text_up_to_column_length(field):
    value = "x" * column_length(field)
    assert coerce_profile_value(field, value) == value


@pytest.mark.parametrize("field", TEXT_FIELDS)
def test_text_over_column_length(field):
    with pytest.raises(ValidationError) as exc_info:
        coerce_profile_value(field, "x" * (column_length(field) + 1))
    assert field in exc_info.value.message


def test_supplier_name_of_400_characters():
    with pytest.raises(ValidationError):
        coerce_profile_value("supplier_name", "A" * 400)


def test_physical_address_is_unbounded():
    address = "Plot 7, " * 200
    assert coerce_profile_value("physical_address", address) == address.strip()


@pytest.mark.parametrize("field", TEXT_FIELDS + ["physical_address"])
def test_blank_text(field):
    with pytest.raises(ValidationError):
        coerce_profile_value(field, "   ")


def test_text_is_stripped():
    assert coerce_profile_value("contact_name", "  John Doe ") == "John Doe"


@pytest.mark.parametrize("field", EMAIL_FIELDS)
@pytest.mark.parametrize("address", ["@", "not an email@", "a@@b", "plainaddress", ""])
def test_malformed_email(field, address):
    with pytest.raises(ValidationError):
        coerce_profile_value(field, address)


@pytest.mark.parametrize("field", EMAIL_FIELDS)
def test_email_is_lowercased(field):
    assert coerce_profile_value(field, " Sales@Acme.Example.com ") == "sales@acme.example.com"


def test_credit_period():
    assert coerce_profile_value("credit_period", "45") == 45
    assert coerce_profile_value("credit_period", "0") == 0


@pytest.mark.parametrize("value", ["-1", "soon", "4.5"])
def test_invalid_credit_period(value):
    with pytest.raises(ValidationError):
        coerce_profile_value("credit_period", value)


def test_field_outside_profile():
    with pytest.raises(ValidationError):
        coerce_profile_value("vendor_number", "V-1")
