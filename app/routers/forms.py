# =============================================================================
# app/routers/forms.py - Onboarding Form Endpoints
# =============================================================================
# Users apply for a role by submitting its form; admins review them under
# /admin/forms (see admin.py).
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, status
from pydantic import BaseModel

from app.auth import get_current_user, AuthUser
from core.models.forms import FormType
from core.services.form_service import FormService

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class FormSubmissionResponse(BaseModel):
    """A stored submission."""
    id: str
    user_id: str
    form_type: FormType
    status: str
    form_data: dict[str, Any]
    files: list[dict[str, Any]] = []
    rejection_reason: str | None = None
    profile_id: str | None = None
    submitted_at: str | None = None


class FormSubmissionList(BaseModel):
    submissions: list[FormSubmissionResponse]
    count: int


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/mine", response_model=FormSubmissionList)
async def list_my_submissions(user: AuthUser = Depends(get_current_user)):
    """List the caller's submissions, newest first."""
    submissions = FormService.list_mine(user.id)
    return FormSubmissionList(
        submissions=[FormSubmissionResponse(**s) for s in submissions],
        count=len(submissions),
    )


@router.post(
    "/{form_type}",
    response_model=FormSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_form(
    form_type: Annotated[FormType, Path(description="Role being applied for")],
    payload: Annotated[dict[str, Any], Body(description="Form fields (camelCase)")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Submit an onboarding form for admin review.

    Policy makers are appointed by admins, so there is no policyMaker form.

    Raises:
        409: A submission of this form type is already pending
        422: The form doesn't match its schema (field errors in details.errors)
    """
    return FormSubmissionResponse(**FormService.submit(user.id, form_type, payload))
