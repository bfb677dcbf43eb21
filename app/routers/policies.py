# =============================================================================
# app/routers/policies.py - Policy Endpoints
# =============================================================================
# Policy makers write policies; startups, researchers and funding agencies
# review them (once each). Any signed-in user can read them.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel

from app.auth import get_current_user, require_role, AuthUser
from core.models.policies import (
    REVIEWER_TYPES,
    Policy,
    PolicyCreate,
    PolicyReview,
    PolicyReviewCreate,
    PolicyUpdate,
)
from core.models.users import Role
from core.services.policy_service import PolicyService

router = APIRouter()

PolicyMakerUser = Annotated[AuthUser, Depends(require_role(Role.POLICY_MAKER))]
ReviewerUser = Annotated[AuthUser, Depends(require_role(*REVIEWER_TYPES))]
PolicyId = Annotated[UUID, Path(description="Policy UUID")]


# =============================================================================
# Response Models
# =============================================================================

class PolicyDetail(Policy):
    reviews: list[PolicyReview] = []


class PolicyList(BaseModel):
    policies: list[Policy]
    count: int


# =============================================================================
# Reading
# =============================================================================

@router.get("", response_model=PolicyList)
async def list_policies(user: AuthUser = Depends(get_current_user)):
    """Every policy, newest first, with review counts."""
    policies = PolicyService.list_all()
    return PolicyList(
        policies=[Policy(**p) for p in policies],
        count=len(policies),
    )


@router.get("/{policy_id}", response_model=PolicyDetail)
async def get_policy(policy_id: PolicyId, user: AuthUser = Depends(get_current_user)):
    """
    Get a policy with its reviews.

    Raises:
        404: Policy not found
    """
    return PolicyDetail(**PolicyService.get_with_reviews(str(policy_id)))


# =============================================================================
# Policy Maker Endpoints
# =============================================================================

@router.post("", response_model=Policy, status_code=status.HTTP_201_CREATED)
async def create_policy(request: PolicyCreate, user: PolicyMakerUser):
    """
    Publish a policy.

    Raises:
        404: The caller has no policy maker profile
    """
    return Policy(**PolicyService.create(str(user.id), request))


@router.patch("/{policy_id}", response_model=Policy)
async def update_policy(policy_id: PolicyId, request: PolicyUpdate, user: PolicyMakerUser):
    """
    Edit a policy.

    Raises:
        404: Policy not found
    """
    return Policy(**PolicyService.update(str(policy_id), request))


@router.delete("/{policy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_policy(policy_id: PolicyId, user: PolicyMakerUser):
    """
    Delete a policy.

    Raises:
        404: Policy not found
    """
    PolicyService.delete(str(policy_id))


# =============================================================================
# Stakeholder Reviews
# =============================================================================

@router.post("/{policy_id}/reviews", response_model=PolicyReview, status_code=status.HTTP_201_CREATED)
async def review_policy(policy_id: PolicyId, request: PolicyReviewCreate, user: ReviewerUser):
    """
    Review a policy. The policy's author is notified.

    Raises:
        404: Policy not found, or the caller has no profile for their role
        409: The caller already reviewed this policy
    """
    review = PolicyService.add_review(str(policy_id), str(user.id), user.role, request.message)
    return PolicyReview(**review)
