# =============================================================================
# core/services/form_service.py - Onboarding Form Submissions
# =============================================================================
# Users apply for a role by submitting that role's form. An admin approves
# (creating the role profile and granting the role) or rejects it.
#
# Lifecycle:
#   pending --approve--> approved
#   pending --reject---> rejected
#
# Transitions are conditional updates on status = pending, so a second
# admin acting on the same submission gets a 409 instead of a double grant.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from core.models.forms import FORM_SCHEMAS, FormStatus, FormType
from core.models.users import PROFILE_TABLES, Role
from core.services.notification_service import NotificationService
from core.services.user_service import UserService
from app.exceptions import (
    DuplicateSubmissionError,
    FormValidationError,
    RecordNotFoundError,
    StatusTransitionError,
)

logger = logging.getLogger(__name__)

TABLE = "form_submissions"


# -----------------------------------------------------------------------------
# Payload Helpers
# -----------------------------------------------------------------------------

def validate_form(form_type: FormType, payload: dict[str, Any]) -> dict[str, Any]:
    """
    Validate a payload against its form schema.

    Returns:
        The normalised payload (camelCase keys, empty fields dropped)

    Raises:
        FormValidationError: With pydantic's field errors
    """
    schema = FORM_SCHEMAS[form_type]
    try:
        form = schema.model_validate(payload)
    except ValidationError as e:
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        raise FormValidationError(form_type.value, errors)
    return form.model_dump(mode="json", by_alias=True, exclude_none=True)


def collect_files(data: Any) -> list[dict[str, str]]:
    """Every {public_id, secure_url} reference found anywhere in the payload."""
    found: list[dict[str, str]] = []
    if isinstance(data, dict):
        if "public_id" in data and "secure_url" in data:
            found.append({"public_id": data["public_id"], "secure_url": data["secure_url"]})
        else:
            for value in data.values():
                found.extend(collect_files(value))
    elif isinstance(data, list):
        for item in data:
            found.extend(collect_files(item))
    return found


def applicant_identity(
    form_type: FormType,
    form_data: dict[str, Any],
) -> tuple[str | None, str | None]:
    """
    (name, email) the profile is created with, read from the form itself.

    Each form keeps them in a different place.
    """
    if form_type == FormType.STARTUP:
        details = form_data.get("startupDetails") or {}
        owner = form_data.get("owner") or {}
        return details.get("startupName") or owner.get("fullName"), owner.get("email")
    if form_type == FormType.RESEARCHER:
        info = form_data.get("personalInfo") or {}
        return info.get("fullName"), info.get("email")
    if form_type == FormType.FUNDING_AGENCY:
        details = form_data.get("agencyDetails") or {}
        owner = form_data.get("owner") or {}
        return details.get("name"), owner.get("email")
    return form_data.get("name"), form_data.get("email")


class FormService:
    """
    Service for onboarding form submissions.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def submit(
        user_id: UUID | str,
        form_type: FormType,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Validate and store a new submission.

        Args:
            user_id: Applicant
            form_type: Which role is being applied for
            payload: Raw form JSON

        Returns:
            Created submission dict

        Raises:
            FormValidationError: If the payload doesn't match the schema
            DuplicateSubmissionError: If the same form is already pending
        """
        form_data = validate_form(form_type, payload)
        user_id_str = str(user_id)

        existing = SupabaseClient.fetch_one(TABLE, {
            "user_id": user_id_str,
            "form_type": form_type.value,
            "status": FormStatus.PENDING.value,
        }, columns="id")
        if existing:
            raise DuplicateSubmissionError(form_type.value)

        user = UserService.get_user(user_id_str) or {}
        submission = SupabaseClient.insert(TABLE, {
            "user_id": user_id_str,
            "form_type": form_type.value,
            "form_data": form_data,
            "files": collect_files(form_data),
            "status": FormStatus.PENDING.value,
            "user_email": user.get("email"),
            "user_name": user.get("name"),
            "submitted_at": utc_now_iso(),
        })

        logger.info(f"User {user_id_str} submitted {form_type.value} form {submission['id']}")
        return submission

    @staticmethod
    def list_mine(user_id: UUID | str) -> list[dict[str, Any]]:
        """The caller's submissions, newest first."""
        return SupabaseClient.fetch_many(
            TABLE, filters={"user_id": str(user_id)}, order_by="submitted_at", desc=True
        )

    @staticmethod
    def list_all(
        status: FormStatus | None = None,
        form_type: FormType | None = None,
    ) -> list[dict[str, Any]]:
        """Admin listing, newest first."""
        filters: dict[str, Any] = {}
        if status:
            filters["status"] = status.value
        if form_type:
            filters["form_type"] = form_type.value
        return SupabaseClient.fetch_many(TABLE, filters=filters, order_by="submitted_at", desc=True)

    @staticmethod
    def get(submission_id: str) -> dict[str, Any]:
        """
        Fetch one submission.

        Raises:
            RecordNotFoundError: If it doesn't exist
        """
        submission = SupabaseClient.fetch_by_id(TABLE, submission_id)
        if not submission:
            raise RecordNotFoundError("Form submission", submission_id)
        return submission

    @staticmethod
    def delete(submission_id: str) -> None:
        """
        Delete a submission.

        Raises:
            RecordNotFoundError: If it doesn't exist
        """
        if not SupabaseClient.delete(TABLE, submission_id):
            raise RecordNotFoundError("Form submission", submission_id)
        logger.info(f"Deleted form submission {submission_id}")

    # -------------------------------------------------------------------------
    # Review
    # -------------------------------------------------------------------------

    @staticmethod
    def _transition(
        submission_id: str,
        target: FormStatus,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        """Move a pending submission to `target`, or raise 404/409."""
        updated = SupabaseClient.update_where_status(
            TABLE, submission_id, FormStatus.PENDING.value, {"status": target.value, **data}
        )
        if updated is None:
            current = FormService.get(submission_id)
            raise StatusTransitionError(
                "Form submission",
                submission_id,
                current.get("status"),
                target.value,
                FormStatus.PENDING.value,
            )
        return updated

    @staticmethod
    def approve(submission_id: str) -> dict[str, Any]:
        """
        Approve a pending submission.

        Creates the role profile from the form data, grants the role and
        links the profile to the submission.

        Returns:
            Updated submission dict

        Raises:
            RecordNotFoundError: If the submission doesn't exist
            StatusTransitionError: If it is no longer pending
        """
        submission = FormService._transition(submission_id, FormStatus.APPROVED, {})

        form_type = FormType(submission["form_type"])
        role = form_type.role
        form_data = submission.get("form_data") or {}
        name, email = applicant_identity(form_type, form_data)

        profile_data: dict[str, Any] = {
            "user_id": submission["user_id"],
            "name": name or submission.get("user_name"),
            "email": email or submission.get("user_email"),
            "details": form_data,
        }
        if role == Role.STARTUP:
            profile_data["is_actively_fundraising"] = False
        if role == Role.IPR_PROFESSIONAL:
            profile_data["wallet_address"] = form_data.get("walletAddress")

        profile = None
        try:
            profile = SupabaseClient.insert(PROFILE_TABLES[role], profile_data)
            submission = SupabaseClient.update(
                TABLE, submission_id, {"profile_id": profile["id"]}
            ) or submission
            UserService.set_role(submission["user_id"], role)
        except Exception as e:
            logger.error(f"Failed to grant {role.value} for submission {submission_id}: {e}")
            FormService._undo_approval(submission_id, role, profile)
            raise

        NotificationService.add(
            submission["user_id"],
            name="Application approved",
            message=f"Your {form_type.value} application has been approved.",
            role=role.value,
        )

        logger.info(f"Approved {form_type.value} submission {submission_id}")
        return submission

    @staticmethod
    def _undo_approval(
        submission_id: str,
        role: Role,
        profile: dict[str, Any] | None,
    ) -> None:
        """Put a half-approved submission back to pending so it can be approved again."""
        try:
            if profile:
                SupabaseClient.delete(PROFILE_TABLES[role], profile["id"])
            SupabaseClient.update_where_status(
                TABLE,
                submission_id,
                FormStatus.APPROVED.value,
                {"status": FormStatus.PENDING.value, "profile_id": None},
            )
            logger.info(f"Reverted submission {submission_id} to pending")
        except Exception as e:
            logger.error(f"Could not revert submission {submission_id}: {e}")

    @staticmethod
    def reject(submission_id: str, reason: str | None = None) -> dict[str, Any]:
        """
        Reject a pending submission.

        Raises:
            RecordNotFoundError: If the submission doesn't exist
            StatusTransitionError: If it is no longer pending
        """
        submission = FormService._transition(
            submission_id, FormStatus.REJECTED, {"rejection_reason": reason}
        )

        message = f"Your {submission['form_type']} application has been rejected."
        if reason:
            message += f" Reason: {reason}"
        NotificationService.add(
            submission["user_id"],
            name="Application rejected",
            message=message,
            role=submission["form_type"],
        )

        logger.info(f"Rejected {submission['form_type']} submission {submission_id}")
        return submission
