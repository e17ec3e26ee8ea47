from __future__ import annotations
from typing import Any


class AdmissionError(Exception):
    """Base for every way a cache submission can fail to be admitted."""
    status_code: int = 500
    public_message: str = "Internal Server Error"

    def payload(self) -> dict[str, Any]:
        return {"error": self.public_message}


class AuthorizationError(AdmissionError):
    status_code = 401
    public_message = "Unauthorized"

    def __init__(self, detail: str = "missing owner identity"):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AdmissionError):
    """All violations found in one submission, keyed by field name."""
    status_code = 400
    public_message = "Invalid input"

    def __init__(self, violations: dict[str, list[str]]):
        super().__init__(f"{len(violations)} invalid field(s): {', '.join(sorted(violations))}")
        self.violations = violations

    def payload(self) -> dict[str, Any]:
        return {"error": self.public_message, "details": self.violations}


class SafetyRejectedError(AdmissionError):
    status_code = 403

    def __init__(self, reason: str, rule_id: Any = None):
        super().__init__(reason)
        self.reason = reason
        # internal only, never sent to the caller
        self.rule_id = rule_id

    def payload(self) -> dict[str, Any]:
        return {"error": self.reason}


class InfrastructureError(AdmissionError):
    """A store or network call failed; the cause stays server-side."""
    status_code = 500

    def __init__(self, cause: BaseException | str, stage: str = "unknown"):
        super().__init__(f"{stage}: {cause!r}")
        self.cause = cause
        self.stage = stage
