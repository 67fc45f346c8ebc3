# backend/errors.py
"""
ShotCoach Exception Hierarchy

Custom exceptions for the coaching loop with recovery hints.
"""

from typing import Any, Dict, Optional


class ShotCoachError(Exception):
    """Base exception for all ShotCoach errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
        }
        if self.details:
            result["details"] = self.details
        if self.recovery_hint:
            result["recoveryHint"] = self.recovery_hint
        return result


# =============================================================================
# CYCLE ERRORS
# =============================================================================

class CycleError(ShotCoachError):
    """Base exception for a single analysis cycle"""

    def __init__(
        self,
        message: str,
        stage: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None
    ):
        super().__init__(message, details, recoverable, recovery_hint)
        self.stage = stage

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["stage"] = self.stage
        return result


class CaptureError(CycleError):
    """Frame capture failed"""

    def __init__(
        self,
        message: str = "Frame capture failed",
        details: Optional[Dict[str, Any]] = None,
        recovery_hint: str = "Cycle skipped; the next cycle will capture again"
    ):
        super().__init__(
            message=message,
            stage="capture",
            details=details,
            recoverable=True,
            recovery_hint=recovery_hint
        )


class CameraUnavailableError(CaptureError):
    """Camera is not open or not ready"""

    def __init__(self, source: Optional[str] = None):
        super().__init__(
            message=f"Camera unavailable: {source}" if source else "Camera unavailable",
            details={"source": source} if source else None,
            recovery_hint="Check the camera is connected and not used by another process"
        )


class EncodeError(CycleError):
    """Downsample/encode of a frame failed"""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Frame encode failed: {reason}",
            stage="encode",
            details={"reason": reason, **(details or {})},
            recoverable=True,
            recovery_hint="Cycle skipped; frame will be re-captured"
        )


# =============================================================================
# INFERENCE ERRORS
# =============================================================================

class InferenceError(CycleError):
    """Vision model inference failed"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: str = "No feedback this cycle; the next cycle will retry"
    ):
        super().__init__(
            message=message,
            stage="inference",
            details=details,
            recoverable=recoverable,
            recovery_hint=recovery_hint
        )


class ProviderError(InferenceError):
    """AI provider error (Claude API, Gemini API, etc.)"""

    def __init__(
        self,
        provider: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(
            message=f"{provider} error: {message}",
            details={"provider": provider, "statusCode": status_code, **(details or {})},
            recoverable=True,
            recovery_hint="Check network connectivity, API key and quota"
        )
        self.provider = provider
        self.status_code = status_code


class ProviderRateLimitError(ProviderError):
    """AI provider rate limit exceeded"""

    def __init__(self, provider: str, retry_after: Optional[int] = None):
        super().__init__(
            provider=provider,
            message="Rate limit exceeded",
            details={"retryAfter": retry_after},
            status_code=429
        )
        self.retry_after = retry_after
        self.recovery_hint = f"Rate limited; retry after {retry_after}s" if retry_after else "Rate limited; try again later"


class ProviderAuthError(ProviderError):
    """AI provider authentication failed"""

    def __init__(self, provider: str):
        super().__init__(
            provider=provider,
            message="Authentication failed",
            status_code=401
        )
        self.recoverable = False
        self.recovery_hint = "Check API key configuration in .env file"


class InferenceTimeoutError(ProviderError):
    """AI provider did not answer in time"""

    def __init__(self, provider: str, timeout_seconds: float):
        super().__init__(
            provider=provider,
            message=f"No response after {timeout_seconds}s",
            details={"timeoutSeconds": timeout_seconds},
        )
        self.recovery_hint = "Network may be slow; increase INFERENCE_TIMEOUT_SECONDS"


class InvalidResponseError(InferenceError):
    """AI provider returned an unusable response"""

    def __init__(
        self,
        message: str = "Invalid response from AI provider",
        raw_response: Optional[str] = None,
        provider: Optional[str] = None
    ):
        super().__init__(
            message=message,
            details={
                "provider": provider,
                "rawResponse": raw_response[:500] if raw_response else None,
            },
            recovery_hint="No feedback this cycle; the next cycle will retry"
        )


# =============================================================================
# REFERENCE PHOTO ERRORS
# =============================================================================

class ReferenceAnalysisError(ShotCoachError):
    """Reference photo could not be loaded or analyzed"""

    def __init__(self, reason: str, source: Optional[str] = None):
        super().__init__(
            message=f"Failed to analyze reference photo: {reason}",
            details={"source": source, "reason": reason},
            recoverable=True,
            recovery_hint="Pick another reference photo or check the URL"
        )


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(ShotCoachError):
    """Input validation failed"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"field": field, "value": value, **(details or {})},
            recoverable=True,
            recovery_hint="Check input values and try again"
        )
        self.field = field


class InvalidImageError(ValidationError):
    """Invalid image data"""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid image: {reason}",
            field="image",
            details={"reason": reason}
        )
        self.recovery_hint = "Ensure image is JPEG/PNG and readable"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(ShotCoachError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"setting": setting, **(details or {})},
            recoverable=False,
            recovery_hint="Check .env configuration file"
        )


class MissingApiKeyError(ConfigurationError):
    """API key not configured"""

    def __init__(self, service: str):
        super().__init__(
            message=f"API key not configured for {service}",
            setting=f"{service.upper()}_API_KEY"
        )
        self.recovery_hint = f"Add {service.upper()}_API_KEY to .env file"
