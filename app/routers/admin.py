# =============================================================================
# app/routers/admin.py - Admin Endpoints
# =============================================================================
# User role management and onboarding form review.
# Every endpoint requires the admin role.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel

from app.auth import require_role, AuthUser
from app.routers.forms import FormSubmissionList, FormSubmissionResponse
from core.models.forms import FormAction, FormActionRequest, FormStatus, FormType
from core.models.users import Role, RoleUpdateRequest, UserRecord
from core.services.form_service import FormService
from core.services.user_service import UserService

router = APIRouter()

AdminUser = Annotated[AuthUser, Depends(require_role(Role.ADMIN))]


# =============================================================================
# Response Models
# =============================================================================

class UserListResponse(BaseModel):
    users: list[UserRecord]
    total: int
    page: int
    page_size: int


# =============================================================================
# Users
# =============================================================================

@router.get("/users", response_model=UserListResponse)
async def list_users(
    admin: AdminUser,
    role: Annotated[Role | None, Query(description="Filter by role")] = None,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 20,
):
    """List users, newest first."""
    users, total = UserService.list_users(role=role, page=page, page_size=page_size)
    return UserListResponse(
        users=[UserRecord(**u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.put("/users/{user_id}/role", response_model=UserRecord)
async def update_user_role(
    user_id: Annotated[UUID, Path(description="User UUID")],
    request: RoleUpdateRequest,
    admin: AdminUser,
):
    """
    Promote a user to policy maker, or demote a policy maker back to user.

    Raises:
        400: Role isn't policyMaker/user, or the user is already in that state
        404: User not found
    """
    return UserRecord(**UserService.change_policy_maker_role(user_id, request.role))


# =============================================================================
# Form Review
# =============================================================================

@router.get("/forms", response_model=FormSubmissionList)
async def list_forms(
    admin: AdminUser,
    status_filter: Annotated[FormStatus | None, Query(alias="status", description="Filter by status")] = None,
    form_type: Annotated[FormType | None, Query(description="Filter by form type")] = None,
):
    """List submissions, newest first."""
    submissions = FormService.list_all(status=status_filter, form_type=form_type)
    return FormSubmissionList(
        submissions=[FormSubmissionResponse(**s) for s in submissions],
        count=len(submissions),
    )


@router.get("/forms/{submission_id}", response_model=FormSubmissionResponse)
async def get_form(
    submission_id: Annotated[UUID, Path(description="Submission UUID")],
    admin: AdminUser,
):
    """Get one submission."""
    return FormSubmissionResponse(**FormService.get(str(submission_id)))


@router.post("/forms/{submission_id}/{action}", response_model=FormSubmissionResponse)
async def review_form(
    submission_id: Annotated[UUID, Path(description="Submission UUID")],
    action: Annotated[FormAction, Path(description="approve or reject")],
    admin: AdminUser,
    request: FormActionRequest | None = None,
):
    """
    Approve or reject a pending submission.

    Approving creates the applicant's role profile and grants the role.
    Both outcomes notify the applicant.

    Raises:
        404: Submission not found
        409: Submission is no longer pending
    """
    if action == FormAction.APPROVE:
        submission = FormService.approve(str(submission_id))
    else:
        submission = FormService.reject(str(submission_id), request.reason if request else None)
    return FormSubmissionResponse(**submission)


@router.delete("/forms/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_form(
    submission_id: Annotated[UUID, Path(description="Submission UUID")],
    admin: AdminUser,
):
    """
    Delete a submission.

    Raises:
        404: Submission not found
    """
    FormService.delete(str(submission_id))
