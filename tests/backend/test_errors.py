"""
Unit tests for the ShotCoach error hierarchy.
"""

from errors import (
    CaptureError,
    CycleError,
    EncodeError,
    InferenceError,
    InferenceTimeoutError,
    MissingApiKeyError,
    ProviderRateLimitError,
    ReferenceAnalysisError,
    ShotCoachError,
)


class TestErrorHierarchy:
    def test_cycle_errors_carry_stage(self):
        assert CaptureError().stage == "capture"
        assert EncodeError("empty frame").stage == "encode"
        assert InferenceError("boom").stage == "inference"

    def test_cycle_errors_are_recoverable(self):
        for error in (CaptureError(), EncodeError("x"), InferenceTimeoutError("claude", 20)):
            assert isinstance(error, CycleError)
            assert error.recoverable is True

    def test_reference_error_is_not_a_cycle_error(self):
        error = ReferenceAnalysisError("HTTP 404", source="https://example.com/a.jpg")
        assert isinstance(error, ShotCoachError)
        assert not isinstance(error, CycleError)
        assert error.details["source"] == "https://example.com/a.jpg"


class TestToDict:
    def test_camel_case_payload(self):
        data = ProviderRateLimitError("gemini", retry_after=30).to_dict()
        assert data["error"] == "ProviderRateLimitError"
        assert data["recoverable"] is True
        assert "30s" in data["recoveryHint"]
        assert data["details"]["retryAfter"] == 30

    def test_missing_api_key(self):
        error = MissingApiKeyError("anthropic")
        assert error.recoverable is False
        assert "ANTHROPIC_API_KEY" in error.recovery_hint
        assert str(error) == "API key not configured for anthropic"
