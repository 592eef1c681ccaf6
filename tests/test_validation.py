"""Tests for record validation."""

import pytest

from golf_scraper.validation import RecordValidator, is_valid_phone


@pytest.mark.parametrize("phone", ["02-123-4567", "031-1234-5678", "010-9876-5432"])
def test_well_formed_phones(phone):
    assert is_valid_phone(phone)


@pytest.mark.parametrize("phone", ["", "-", None, "  "])
def test_unknown_phone_placeholders_are_accepted(phone):
    assert is_valid_phone(phone)


@pytest.mark.parametrize("phone", ["12345", "0212345678", "02-12-4567", "phone: 02-123-4567"])
def test_malformed_phones(phone):
    assert not is_valid_phone(phone)


class TestRecordValidator:

    @pytest.fixture
    def validator(self):
        return RecordValidator(required=('name', 'address'), phones=('tel',))

    def test_valid_record(self, validator):
        record = {'name': 'Golfzone Gangnam', 'address': 'Seoul', 'tel': '02-555-1234'}
        assert validator.validate(record) is None
        assert validator(record)

    def test_missing_required_field(self, validator):
        reason = validator.validate({'name': '  ', 'address': 'Seoul'})
        assert "name" in reason

    def test_bad_phone(self, validator):
        reason = validator.validate({'name': 'A', 'address': 'Seoul', 'tel': '555'})
        assert "tel" in reason
        assert not validator({'name': 'A', 'address': 'Seoul', 'tel': '555'})
