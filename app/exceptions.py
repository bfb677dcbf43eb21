# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class InnovateHubException(Exception):
    """
    Base exception for the InnovateHub API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "INNOVATEHUB_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Lookup Exceptions
# =============================================================================

class RecordNotFoundError(InnovateHubException):
    """Raised when a record ID doesn't exist (or isn't visible to the caller)."""

    def __init__(self, resource: str, record_id: str):
        super().__init__(
            message=f"{resource} not found: {record_id}",
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource.lower()} id is correct",
            details={"id": record_id}
        )


class ProfileNotFoundError(InnovateHubException):
    """Raised when the caller has no profile for the role an endpoint needs."""

    def __init__(self, role: str, user_id: str):
        super().__init__(
            message=f"No {role} profile found for user {user_id}",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion=f"Submit the {role} onboarding form and wait for admin approval",
            details={"role": role, "user_id": user_id}
        )


# =============================================================================
# Workflow Exceptions
# =============================================================================

class StatusTransitionError(InnovateHubException):
    """Raised when a record is not in the status a transition requires."""

    def __init__(
        self,
        resource: str,
        record_id: str,
        current: str | None,
        target: str,
        required: str,
    ):
        super().__init__(
            message=f"Cannot move {resource.lower()} {record_id} to '{target}' from '{current}'",
            code="INVALID_STATUS_TRANSITION",
            status_code=409,
            suggestion=f"Only {resource.lower()}s in '{required}' status can be moved to '{target}'. Re-fetch the record.",
            details={
                "id": record_id,
                "current_status": current,
                "target_status": target,
                "required_status": required,
            }
        )


class FormValidationError(InnovateHubException):
    """Raised when an onboarding form payload fails its schema."""

    def __init__(self, form_type: str, errors: list[dict[str, Any]]):
        super().__init__(
            message=f"Invalid {form_type} form",
            code="FORM_VALIDATION_ERROR",
            status_code=422,
            suggestion="Fix the fields listed in details.errors and resubmit",
            details={"form_type": form_type, "errors": errors}
        )


class DuplicateSubmissionError(InnovateHubException):
    """Raised when a user already has a pending submission of the same form type."""

    def __init__(self, form_type: str):
        super().__init__(
            message=f"A {form_type} form is already awaiting review",
            code="DUPLICATE_SUBMISSION",
            status_code=409,
            suggestion="Wait for the pending submission to be approved or rejected",
            details={"form_type": form_type}
        )


class DuplicateReviewError(InnovateHubException):
    """Raised when a reviewer has already reviewed this policy."""

    def __init__(self, policy_id: str):
        super().__init__(
            message=f"You have already reviewed policy {policy_id}",
            code="DUPLICATE_REVIEW",
            status_code=409,
            suggestion="Each startup, researcher or agency can review a policy once",
            details={"policy_id": policy_id}
        )


class InvalidRoleChangeError(InnovateHubException):
    """Raised when an admin role change is not allowed."""

    def __init__(self, message: str, user_id: str, role: str):
        super().__init__(
            message=message,
            code="INVALID_ROLE_CHANGE",
            status_code=400,
            suggestion="Only 'policyMaker' and 'user' can be assigned here; other roles come from approved forms",
            details={"user_id": user_id, "role": role}
        )


class InvalidTimeframeError(InnovateHubException):
    """Raised when metrics are requested for an unknown timeframe."""

    def __init__(self, timeframe: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid timeframe: {timeframe}",
            code="INVALID_TIMEFRAME",
            status_code=400,
            suggestion=f"Use one of: {', '.join(allowed)}",
            details={"timeframe": timeframe, "allowed": allowed}
        )


class InvalidFilingTypeError(InnovateHubException):
    """Raised when an IP filing type slug is not recognised."""

    def __init__(self, slug: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid filing type: {slug}",
            code="INVALID_FILING_TYPE",
            status_code=400,
            suggestion=f"Use one of: {', '.join(allowed)}",
            details={"type": slug, "allowed": allowed}
        )


# =============================================================================
# Messaging Exceptions
# =============================================================================

class InvalidRecipientError(InnovateHubException):
    """Raised when a message is addressed to an unknown user or to the sender."""

    def __init__(self, receiver_id: str, reason: str):
        super().__init__(
            message=f"Cannot send message to {receiver_id}: {reason}",
            code="INVALID_RECIPIENT",
            status_code=400,
            suggestion="Pick a recipient from GET /api/v1/users/available",
            details={"receiver_id": receiver_id}
        )


class ChatAccessDeniedError(InnovateHubException):
    """Raised when a user opens a chat stream they don't participate in."""

    def __init__(self, chat_id: str):
        super().__init__(
            message=f"Not a participant of chat {chat_id}",
            code="CHAT_ACCESS_DENIED",
            status_code=403,
            suggestion="Chat ids are the two participant ids sorted and joined with '_'",
            details={"chat_id": chat_id}
        )


# =============================================================================
# Background Task Exceptions
# =============================================================================

class TaskQueueError(InnovateHubException):
    """Raised when a background task cannot be submitted."""

    def __init__(self, task_name: str, error: str):
        super().__init__(
            message=f"Failed to queue {task_name}: {error}",
            code="TASK_QUEUE_ERROR",
            status_code=503,
            suggestion="Check that Redis is running and reachable via REDIS_URL",
            details={"task": task_name, "error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def innovatehub_exception_handler(
    request: Request,
    exc: InnovateHubException
) -> JSONResponse:
    """
    Convert InnovateHubException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def supabase_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Convert database wrapper errors to a 502 response.

    The wrapper error already carries a code and suggestion.
    """
    content = {
        "detail": getattr(exc, "message", str(exc)),
        "code": getattr(exc, "code", "SUPABASE_ERROR"),
    }
    suggestion = getattr(exc, "suggestion", None)
    if suggestion:
        content["suggestion"] = suggestion
    return JSONResponse(status_code=502, content=content)
