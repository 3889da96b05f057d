"""Unit tests for user_validation module."""

import unittest
from datetime import date

from domain.model.errors import ShapeViolationError
from domain.model.user import UserCreate, UserUpdate
from services.user_validation import (
    PHONE_PATTERN,
    ensure_valid_create,
    ensure_valid_update,
    validate_create,
    validate_update,
)

TODAY = date(2024, 6, 1)


def _create(**kwargs) -> UserCreate:
    defaults = {
        "name": "Ana Silva",
        "email": "Ana@Mail.com",
        "password": "secret1",
        "birth_date": date(2000, 1, 1),
        "phone": "(11) 98765-4321",
    }
    defaults.update(kwargs)
    return UserCreate(**defaults)


def _update(**kwargs) -> UserUpdate:
    defaults = {
        "name": "Ana Silva",
        "email": "ana@mail.com",
        "birth_date": date(2000, 1, 1),
        "phone": None,
        "active": None,
    }
    defaults.update(kwargs)
    return UserUpdate(**defaults)


def _fields(violations) -> list[str]:
    return [v.field for v in violations]


class TestValidateCreate(unittest.TestCase):
    """Test validate_create function."""

    def test_valid_input_has_no_violations(self):
        self.assertEqual(validate_create(_create(), today=TODAY), [])

    def test_phone_is_optional(self):
        self.assertEqual(validate_create(_create(phone=None), today=TODAY), [])
        self.assertEqual(validate_create(_create(phone=""), today=TODAY), [])

    def test_empty_name_reports_required_only(self):
        violations = validate_create(_create(name=""), today=TODAY)

        self.assertEqual(len(violations), 1)
        self.assertEqual(violations[0].field, 'name')
        self.assertEqual(violations[0].message, "Name is required")

    def test_name_length_bounds(self):
        self.assertEqual(_fields(validate_create(_create(name="Al"), today=TODAY)), ['name'])
        self.assertEqual(validate_create(_create(name="Ana"), today=TODAY), [])
        self.assertEqual(validate_create(_create(name="x" * 100), today=TODAY), [])
        self.assertEqual(_fields(validate_create(_create(name="x" * 101), today=TODAY)), ['name'])

    def test_invalid_email(self):
        violations = validate_create(_create(email="not-an-email"), today=TODAY)

        self.assertEqual(_fields(violations), ['email'])
        self.assertEqual(violations[0].message, "Email is invalid")

    def test_missing_email(self):
        violations = validate_create(_create(email=""), today=TODAY)
        self.assertEqual([v.message for v in violations], ["Email is required"])

    def test_short_password(self):
        violations = validate_create(_create(password="12345"), today=TODAY)

        self.assertEqual(_fields(violations), ['password'])
        self.assertEqual(violations[0].message, "Password must be at least 6 characters")

    def test_missing_password(self):
        violations = validate_create(_create(password=""), today=TODAY)
        self.assertEqual([v.message for v in violations], ["Password is required"])

    def test_missing_birth_date(self):
        violations = validate_create(_create(birth_date=None), today=TODAY)
        self.assertEqual([v.message for v in violations], ["Birth date is required"])

    def test_birth_date_must_be_before_today(self):
        self.assertEqual(_fields(validate_create(_create(birth_date=TODAY), today=TODAY)), ['birth_date'])
        self.assertEqual(
            _fields(validate_create(_create(birth_date=date(2030, 1, 1)), today=TODAY)),
            ['birth_date'],
        )

    def test_phone_format(self):
        violations = validate_create(_create(phone="12345"), today=TODAY)

        self.assertEqual(_fields(violations), ['phone'])
        self.assertEqual(violations[0].message, "Phone must match the format (XX) XXXXX-XXXX")

    def test_all_violations_reported_together(self):
        data = UserCreate(name="", email="bad", password="123", birth_date=None, phone="12345")
        violations = validate_create(data, today=TODAY)

        self.assertEqual(
            _fields(violations),
            ['name', 'email', 'password', 'birth_date', 'phone'],
        )

    def test_unparsed_birth_date_is_invalid(self):
        violations = validate_create(_create(birth_date="not-a-date"), today=TODAY)
        self.assertEqual([v.message for v in violations], ["Birth date is invalid"])

    def test_non_string_values_are_reported_not_raised(self):
        data = UserCreate(name=None, email=42, password=["secret1"], birth_date=20000101, phone=11987654321)
        violations = validate_create(data, today=TODAY)

        self.assertEqual(
            [(v.field, v.message) for v in violations],
            [
                ('name', "Name is required"),
                ('email', "Email is required"),
                ('password', "Password is required"),
                ('birth_date', "Birth date is invalid"),
                ('phone', "Phone must match the format (XX) XXXXX-XXXX"),
            ],
        )

    def test_defaults_to_current_date(self):
        self.assertEqual(validate_create(_create()), [])


class TestValidateUpdate(unittest.TestCase):
    """Test validate_update function."""

    def test_valid_input_has_no_violations(self):
        self.assertEqual(validate_update(_update(), today=TODAY), [])

    def test_password_is_not_checked(self):
        # UserUpdate has no password; the rule table must not reference it
        self.assertNotIn('password', _fields(validate_update(_update(name=""), today=TODAY)))

    def test_all_violations_reported_together(self):
        data = _update(name="Al", email="", birth_date=date(2030, 1, 1), phone="abc")
        violations = validate_update(data, today=TODAY)

        self.assertEqual(_fields(violations), ['name', 'email', 'birth_date', 'phone'])

    def test_active_must_be_boolean(self):
        violations = validate_update(_update(active="yes"), today=TODAY)

        self.assertEqual(_fields(violations), ['active'])
        self.assertEqual(violations[0].message, "Active must be true or false")
        self.assertEqual(validate_update(_update(active=False), today=TODAY), [])


class TestPhonePattern(unittest.TestCase):
    """Accepted and rejected phone layouts."""

    def test_accepted_formats(self):
        for phone in ("(11) 98765-4321", "11987654321", "(11)8765-4321", "11 98765-4321", "11-87654321"):
            with self.subTest(phone=phone):
                self.assertIsNotNone(PHONE_PATTERN.match(phone))

    def test_rejected_formats(self):
        for phone in ("12345", "(1) 98765-4321", "(11) 987654-4321", "phone", "(11) 98765-43210"):
            with self.subTest(phone=phone):
                self.assertIsNone(PHONE_PATTERN.match(phone))


class TestEnsureValid(unittest.TestCase):
    """Test ensure_valid_create / ensure_valid_update raising helpers."""

    def test_ensure_valid_create_passes(self):
        ensure_valid_create(_create(), today=TODAY)

    def test_ensure_valid_create_raises_with_all_violations(self):
        with self.assertRaises(ShapeViolationError) as ctx:
            ensure_valid_create(_create(name="", phone="12345"), today=TODAY)

        self.assertEqual(_fields(ctx.exception.violations), ['name', 'phone'])

    def test_ensure_valid_update_raises(self):
        with self.assertRaises(ShapeViolationError):
            ensure_valid_update(_update(email="nope"), today=TODAY)


if __name__ == '__main__':
    unittest.main()
