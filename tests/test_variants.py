"""Tests for typed application errors."""

import json

import pytest

from errguard.errors.taxonomy import ErrorCategory, ErrorSeverity, NormalizedError
from errguard.errors.variants import (
    USER_MESSAGES,
    VALIDATION_SUMMARY,
    VARIANT_DEFAULTS,
    AppError,
    ErrorKind,
)


class TestVariantDefaults:
    """Each variant constructed with only a message gets sane defaults."""

    @pytest.mark.parametrize(
        "factory,category,severity,retry,code",
        [
            (AppError.network, ErrorCategory.NETWORK, ErrorSeverity.HIGH, True, None),
            (AppError.timeout, ErrorCategory.NETWORK, ErrorSeverity.MEDIUM, True, None),
            (
                AppError.authentication,
                ErrorCategory.AUTHENTICATION,
                ErrorSeverity.HIGH,
                True,
                None,
            ),
            (
                AppError.session_expired,
                ErrorCategory.AUTHENTICATION,
                ErrorSeverity.HIGH,
                True,
                None,
            ),
            (AppError.authorization, ErrorCategory.AUTHORIZATION, ErrorSeverity.HIGH, False, None),
            (AppError.validation, ErrorCategory.VALIDATION, ErrorSeverity.MEDIUM, True, None),
            (AppError.server, ErrorCategory.SERVER, ErrorSeverity.HIGH, True, None),
            (AppError.not_found, ErrorCategory.SERVER, ErrorSeverity.MEDIUM, False, 404),
            (AppError.rate_limit, ErrorCategory.SERVER, ErrorSeverity.MEDIUM, True, 429),
        ],
    )
    def test_defaults(self, factory, category, severity, retry, code):
        """Category, severity, retry and code follow the variant table."""
        error = factory("low-level detail")
        assert error.category == category
        assert error.severity == severity
        assert error.retry is retry
        assert error.code == code
        assert error.message == "low-level detail"

    def test_every_kind_has_defaults_and_message(self):
        """The variant tables cover the whole kind set."""
        assert set(VARIANT_DEFAULTS) == set(ErrorKind)
        assert set(USER_MESSAGES) == set(ErrorKind)

    def test_default_message_when_omitted(self):
        """Omitting the message uses the variant's fallback text."""
        assert AppError.not_found().message == "Resource not found"
        assert AppError.rate_limit().message == "Rate limit exceeded"

    def test_caller_code_overrides_default(self):
        """A supplied code replaces the 404/429 defaults."""
        assert AppError.not_found(code=410).code == 410
        assert AppError.rate_limit(code="THROTTLED").code == "THROTTLED"

    def test_generic_error(self):
        """The generic variant is unknown/medium and not retryable."""
        error = AppError("Something broke")
        assert error.kind == ErrorKind.GENERIC
        assert error.category == ErrorCategory.UNKNOWN
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.retry is False
        assert error.user_message() == "Something broke"

    def test_is_exception(self):
        """AppError can be raised and caught."""
        with pytest.raises(AppError) as exc_info:
            raise AppError.server("boom", code=503)
        assert str(exc_info.value) == "boom"
        assert exc_info.value.code == 503

    def test_timestamp_is_iso(self):
        """Timestamp is set at construction as ISO-8601."""
        from datetime import datetime

        error = AppError.network()
        assert datetime.fromisoformat(error.timestamp)


class TestUserMessages:
    """Tests for user-facing copy."""

    @pytest.mark.parametrize(
        "factory",
        [
            AppError.authentication,
            AppError.authorization,
            AppError.server,
            AppError.not_found,
            AppError.network,
            AppError.session_expired,
        ],
    )
    def test_fixed_copy_hides_low_level_message(self, factory):
        """Fixed-copy variants never expose the low-level message."""
        error = factory("SQLSTATE 42P01 relation users missing")
        assert "SQLSTATE" not in error.user_message()
        assert error.user_message()

    def test_validation_first_field_message(self):
        """Validation surfaces the first message of the first field."""
        error = AppError.validation(
            "Validation failed",
            field_errors={"email": ["Email is required", "Email is invalid"], "age": ["Too young"]},
        )
        assert error.user_message() == "Email is required"

    def test_validation_without_fields(self):
        """Validation without field errors returns the summary copy."""
        assert AppError.validation("bad").user_message() == VALIDATION_SUMMARY

    def test_validation_summary_without_detail(self):
        """Turning detail off hides field messages behind the summary."""
        error = AppError.validation(field_errors={"email": ["Email is required"]})
        assert error.user_message(detailed_validation=False) == VALIDATION_SUMMARY
        assert error.user_message() == "Email is required"

    def test_detail_switch_only_affects_validation(self):
        """Other variants ignore the validation detail switch."""
        error = AppError.rate_limit(retry_after=5)
        assert error.user_message(detailed_validation=False) == error.user_message()

    def test_validation_empty_first_field_falls_back_to_message(self):
        """An empty first field list falls back to the error message."""
        error = AppError.validation("Form rejected", field_errors={"name": []})
        assert error.user_message() == "Form rejected"

    def test_rate_limit_with_retry_after(self):
        """Rate limit interpolates its retry-after seconds."""
        error = AppError.rate_limit(retry_after=30)
        assert error.user_message() == "Request limit reached. Please try again in 30 seconds."

    def test_rate_limit_without_retry_after(self):
        """Rate limit without retry-after asks to try later."""
        assert AppError.rate_limit().user_message() == (
            "Request limit reached. Please try again later."
        )

    def test_user_message_is_deterministic(self):
        """Repeated calls give the same copy."""
        error = AppError.validation(field_errors={"a": ["x"]})
        assert error.user_message() == error.user_message()


class TestValidationHelpers:
    """Tests for validation payload helpers."""

    def test_all_messages(self):
        """All field errors are listed as field: message."""
        error = AppError.validation(field_errors={"email": ["required"], "age": ["too low", "nan"]})
        assert error.all_messages() == ["email: required", "age: too low", "age: nan"]

    def test_all_messages_without_fields(self):
        """Without field errors the message itself is returned."""
        assert AppError.validation("Nope").all_messages() == ["Nope"]

    def test_field_lookup(self):
        """Per-field helpers report presence and contents."""
        error = AppError.validation(field_errors={"email": ["required"], "name": []})
        assert error.has_field_error("email")
        assert not error.has_field_error("name")
        assert not error.has_field_error("missing")
        assert error.field_errors_for("email") == ["required"]
        assert error.field_errors_for("missing") == []

    def test_field_errors_copied(self):
        """The caller's mapping is not shared with the error."""
        fields = {"email": ["required"]}
        error = AppError.validation(field_errors=fields)
        fields["other"] = ["x"]
        assert "other" not in error.field_errors


class TestBehaviour:
    """Tests for retry, family and logging helpers."""

    def test_can_retry(self):
        """can_retry mirrors the retry flag."""
        assert AppError.network().can_retry()
        assert not AppError.authorization().can_retry()

    def test_server_family(self):
        """Not-found and rate-limit belong to the server family."""
        assert AppError.server().is_server_family
        assert AppError.not_found().is_server_family
        assert AppError.rate_limit().is_server_family
        assert not AppError.network().is_server_family

    def test_log_message_is_json(self):
        """log_message produces a JSON document with the key fields."""
        error = AppError.not_found("missing")
        document = json.loads(error.log_message())
        assert document["name"] == "AppError"
        assert document["kind"] == "not_found"
        assert document["code"] == 404
        assert document["category"] == "server"
        assert "missing" in document["stack"]


class TestNormalizedError:
    """Tests for the normalized record."""

    def test_empty_message_rejected(self):
        """The message must never be empty."""
        with pytest.raises(ValueError):
            NormalizedError(message="", severity=ErrorSeverity.LOW, category=ErrorCategory.CLIENT)

    def test_immutable(self):
        """Records cannot be modified after creation."""
        from dataclasses import FrozenInstanceError

        error = NormalizedError("x", ErrorSeverity.LOW, ErrorCategory.CLIENT)
        with pytest.raises(FrozenInstanceError):
            error.message = "y"

    def test_with_message_returns_copy(self):
        """with_message leaves the original untouched."""
        error = NormalizedError("x", ErrorSeverity.LOW, ErrorCategory.CLIENT)
        changed = error.with_message("y")
        assert changed.message == "y"
        assert error.message == "x"
        assert changed.timestamp == error.timestamp

    def test_to_dict(self):
        """to_dict uses string enum values."""
        error = NormalizedError("x", ErrorSeverity.HIGH, ErrorCategory.NETWORK, code=503)
        data = error.to_dict()
        assert data["severity"] == "high"
        assert data["category"] == "network"
        assert data["code"] == 503
        assert data["retry"] is False
