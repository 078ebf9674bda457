"""Unit tests for account input validation."""

import pytest

from mdth_api.lib.validators import (
    ValidationResult,
    is_valid_email,
    normalize_email,
    normalize_full_name,
    normalize_username,
    validate_login,
    validate_profile_update,
    validate_registration,
)


class TestNormalization:
    """Tests for field normalization helpers."""

    def test_username_trimmed(self) -> None:
        assert normalize_username("  alice ") == "alice"

    def test_username_none(self) -> None:
        assert normalize_username(None) == ""

    def test_email_trimmed_and_lowercased(self) -> None:
        assert normalize_email("  Alice@X.COM ") == "alice@x.com"

    def test_full_name_blank_becomes_none(self) -> None:
        assert normalize_full_name("   ") is None
        assert normalize_full_name(None) is None
        assert normalize_full_name(" Alice Smith ") == "Alice Smith"


class TestValidationResult:
    """Tests for the tagged result type."""

    def test_empty_result_is_ok(self) -> None:
        result = ValidationResult()
        assert result.ok
        assert result.message == ""

    def test_message_falls_back_to_first_error(self) -> None:
        result = ValidationResult({"email": "Email address is invalid"})
        assert not result.ok
        assert result.message == "Email address is invalid"


class TestValidateRegistration:
    """Tests for validate_registration."""

    def test_valid(self) -> None:
        assert validate_registration("alice", "a@x.com", "secret1", "Alice").ok

    @pytest.mark.parametrize(
        ("username", "email", "password", "missing"),
        [
            (None, "a@x.com", "secret1", "username"),
            ("alice", "", "secret1", "email"),
            ("alice", "a@x.com", None, "password"),
            ("   ", "a@x.com", "secret1", "username"),
        ],
    )
    def test_missing_fields(self, username: str | None, email: str | None, password: str | None, missing: str) -> None:
        result = validate_registration(username, email, password)
        assert not result.ok
        assert missing in result.errors
        assert result.message == "Username, email, and password are required"

    def test_short_password(self) -> None:
        result = validate_registration("alice", "a@x.com", "12345")
        assert result.errors == {"password": "Password must be at least 6 characters long"}

    def test_six_char_password_accepted(self) -> None:
        assert validate_registration("alice", "a@x.com", "123456").ok

    def test_username_too_short(self) -> None:
        result = validate_registration("al", "a@x.com", "secret1")
        assert "username" in result.errors

    def test_username_length_measured_after_trim(self) -> None:
        assert not validate_registration("  al  ", "a@x.com", "secret1").ok

    def test_username_too_long(self) -> None:
        result = validate_registration("a" * 51, "a@x.com", "secret1")
        assert "username" in result.errors

    def test_username_max_length_accepted(self) -> None:
        assert validate_registration("a" * 50, "a@x.com", "secret1").ok

    def test_invalid_email(self) -> None:
        result = validate_registration("alice", "not-an-email", "secret1")
        assert result.errors == {"email": "Email address is invalid"}

    def test_full_name_too_long(self) -> None:
        result = validate_registration("alice", "a@x.com", "secret1", "x" * 101)
        assert "fullName" in result.errors

    def test_collects_every_error(self) -> None:
        result = validate_registration("al", "bad", "123")
        assert set(result.errors) == {"username", "email", "password"}


class TestValidateLogin:
    """Tests for validate_login."""

    def test_valid(self) -> None:
        assert validate_login("alice", "secret1").ok

    def test_missing_username(self) -> None:
        result = validate_login("", "secret1")
        assert result.message == "Username and password are required"
        assert "username" in result.errors

    def test_missing_password(self) -> None:
        result = validate_login("alice", None)
        assert "password" in result.errors

    def test_short_password_not_checked_at_login(self) -> None:
        assert validate_login("alice", "x").ok


class TestValidateProfileUpdate:
    """Tests for validate_profile_update."""

    def test_empty_update_is_ok(self) -> None:
        assert validate_profile_update(None, None).ok

    def test_blank_values_ignored(self) -> None:
        assert validate_profile_update("  ", "  ").ok

    def test_invalid_email(self) -> None:
        assert "email" in validate_profile_update(None, "nope").errors

    def test_full_name_too_long(self) -> None:
        assert "fullName" in validate_profile_update("y" * 101, None).errors


class TestIsValidEmail:
    @pytest.mark.parametrize("email", ["a@x.com", "first.last@mdth.io", "user+tag@school.edu"])
    def test_valid(self, email: str) -> None:
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["", "plain", "@x.com", "a@", "a b@x.com"])
    def test_invalid(self, email: str) -> None:
        assert not is_valid_email(email)
