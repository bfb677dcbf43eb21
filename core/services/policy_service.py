# =============================================================================
# core/services/policy_service.py - Policies & Stakeholder Reviews
# =============================================================================
# Policies are written by policy makers (created_by is the policy_makers
# profile id). Reviews live in their own table, one per reviewer user and
# policy; reviewer_id is the reviewer's role profile id.
# =============================================================================

import logging
from collections import Counter
from typing import Any, Iterable

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from core.models.policies import (
    REVIEWER_TYPES,
    PolicyCreate,
    PolicyUpdate,
    ReviewerType,
)
from core.models.users import PROFILE_TABLES, Role
from core.services.notification_service import NotificationService
from core.services.user_service import UserService
from app.exceptions import DuplicateReviewError, RecordNotFoundError

logger = logging.getLogger(__name__)

TABLE = "policies"
REVIEWS_TABLE = "policy_reviews"
POLICY_MAKER_TABLE = PROFILE_TABLES[Role.POLICY_MAKER]

REVIEWER_TABLES: dict[str, str] = {
    reviewer_type.value: PROFILE_TABLES[role] for role, reviewer_type in REVIEWER_TYPES.items()
}

METRIC_KEYS: dict[str, str] = {
    ReviewerType.STARTUP.value: "startupReviews",
    ReviewerType.RESEARCHER.value: "researcherReviews",
    ReviewerType.FUNDING_AGENCY.value: "fundingAgencyReviews",
}


def policy_metrics(reviews: Iterable[dict[str, Any]]) -> dict[str, int]:
    """Review counts in total and per reviewer type."""
    counts = Counter(r.get("reviewer_type") for r in reviews)
    metrics = {"totalReviews": sum(counts.values())}
    for reviewer_type, key in METRIC_KEYS.items():
        metrics[key] = counts.get(reviewer_type, 0)
    return metrics


class PolicyService:
    """
    Service for policies and their reviews.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create(user_id: str, data: PolicyCreate) -> dict[str, Any]:
        """
        Publish a new policy.

        Raises:
            ProfileNotFoundError: If the caller has no policy maker profile
        """
        author = UserService.require_profile(user_id, Role.POLICY_MAKER)
        now = utc_now_iso()

        policy = SupabaseClient.insert(TABLE, {
            **data.model_dump(mode="json"),
            "created_by": author["id"],
            "updated_at": now,
        })

        logger.info(f"Policy maker {author['id']} created policy {policy['id']}")
        return {**policy, "metrics": policy_metrics([])}

    @staticmethod
    def list_all() -> list[dict[str, Any]]:
        """Every policy, newest first, with review counts."""
        policies = SupabaseClient.fetch_many(TABLE, desc=True)

        policy_ids = sorted({str(p["id"]) for p in policies})
        reviews = SupabaseClient.fetch_many(
            REVIEWS_TABLE,
            filters={"policy_id": policy_ids},
            columns="policy_id, reviewer_type",
            order_by=None,
        ) if policy_ids else []

        by_policy: dict[str, list[dict[str, Any]]] = {}
        for review in reviews:
            by_policy.setdefault(str(review["policy_id"]), []).append(review)

        for policy in policies:
            policy["metrics"] = policy_metrics(by_policy.get(str(policy["id"]), []))
        return policies

    @staticmethod
    def get(policy_id: str) -> dict[str, Any]:
        """
        Fetch a policy.

        Raises:
            RecordNotFoundError: If it doesn't exist
        """
        policy = SupabaseClient.fetch_by_id(TABLE, policy_id)
        if not policy:
            raise RecordNotFoundError("Policy", policy_id)
        return policy

    @staticmethod
    def get_with_reviews(policy_id: str) -> dict[str, Any]:
        """A policy with its reviews (oldest first, with reviewer name/email) and counts."""
        policy = PolicyService.get(policy_id)
        reviews = SupabaseClient.fetch_many(REVIEWS_TABLE, filters={"policy_id": str(policy["id"])})

        for reviewer_type, table in REVIEWER_TABLES.items():
            typed = [r for r in reviews if r.get("reviewer_type") == reviewer_type]
            ids = sorted({str(r["reviewer_id"]) for r in typed})
            if not ids:
                continue
            profiles = {
                str(p["id"]): p for p in SupabaseClient.fetch_many(
                    table, filters={"id": ids}, columns="id, name, email", order_by=None
                )
            }
            for review in typed:
                review["reviewer"] = profiles.get(str(review["reviewer_id"]))

        return {**policy, "reviews": reviews, "metrics": policy_metrics(reviews)}

    @staticmethod
    def update(policy_id: str, data: PolicyUpdate) -> dict[str, Any]:
        """
        Change the fields sent in `data`.

        Raises:
            RecordNotFoundError: If it doesn't exist
        """
        changes = data.model_dump(mode="json", exclude_unset=True)
        if not changes:
            return PolicyService.get(policy_id)

        updated = SupabaseClient.update(TABLE, policy_id, {**changes, "updated_at": utc_now_iso()})
        if not updated:
            raise RecordNotFoundError("Policy", policy_id)

        logger.info(f"Updated policy {policy_id}: {sorted(changes)}")
        return updated

    @staticmethod
    def delete(policy_id: str) -> None:
        """
        Delete a policy.

        Raises:
            RecordNotFoundError: If it doesn't exist
        """
        if not SupabaseClient.delete(TABLE, policy_id):
            raise RecordNotFoundError("Policy", policy_id)
        logger.info(f"Deleted policy {policy_id}")

    # -------------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------------

    @staticmethod
    def add_review(policy_id: str, user_id: str, role: Role, message: str) -> dict[str, Any]:
        """
        Leave the caller's review on a policy and tell its author.

        Raises:
            ProfileNotFoundError: If the caller has no profile for their role
            RecordNotFoundError: If the policy doesn't exist
            DuplicateReviewError: If the caller already reviewed it
        """
        reviewer = UserService.require_profile(user_id, role)
        policy = PolicyService.get(policy_id)

        existing = SupabaseClient.fetch_one(REVIEWS_TABLE, {
            "policy_id": str(policy["id"]),
            "reviewer_user_id": str(user_id),
        }, columns="id")
        if existing:
            raise DuplicateReviewError(policy_id)

        reviewer_type = REVIEWER_TYPES[role]
        review = SupabaseClient.insert(REVIEWS_TABLE, {
            "policy_id": str(policy["id"]),
            "reviewer_id": reviewer["id"],
            "reviewer_user_id": str(user_id),
            "reviewer_type": reviewer_type.value,
            "message": message,
        })

        author = SupabaseClient.fetch_by_id(
            POLICY_MAKER_TABLE, policy["created_by"], columns="id, user_id"
        ) if policy.get("created_by") else None
        if author:
            NotificationService.add(
                author["user_id"],
                name="New policy review",
                message=f'{reviewer.get("name") or "A stakeholder"} reviewed "{policy["title"]}".',
                role=Role.POLICY_MAKER.value,
            )

        logger.info(f"{reviewer_type.value} {reviewer['id']} reviewed policy {policy_id}")
        return {**review, "reviewer": {"id": reviewer["id"], "name": reviewer.get("name"), "email": reviewer.get("email")}}
