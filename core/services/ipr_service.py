# =============================================================================
# core/services/ipr_service.py - IP Filing Operations
# =============================================================================
# Filings are owned by a startup or researcher profile (owner_id is the
# profile id) and reviewed by an IP professional (reviewer_id is the
# ipr_professionals profile id).
#
# Review flow:
#   1. Conditional update Pending -> Accepted/Rejected with
#      transaction_hash = WAITING
#   2. With the ledger configured, the record_ipr_decision worker task
#      writes the decision on chain and stores the real hash; on failure it
#      puts the filing back to Pending (see revert_decision)
#   3. Without it, the reviewer signs with their own wallet and posts the
#      hash to /transaction-hash
# =============================================================================

import logging
from typing import Any, Iterable

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from core.models.ipr import (
    FILING_TYPE_SLUGS,
    WAITING_HASH,
    FilingStatus,
    IprCreate,
    OwnerType,
)
from core.models.users import PROFILE_TABLES, Role
from core.services.notification_service import NotificationService
from core.services.user_service import UserService
from app.config import settings
from app.exceptions import (
    InvalidFilingTypeError,
    RecordNotFoundError,
    StatusTransitionError,
    TaskQueueError,
)

logger = logging.getLogger(__name__)

TABLE = "ipr_filings"

OWNER_TABLES: dict[str, str] = {
    OwnerType.STARTUP.value: PROFILE_TABLES[Role.STARTUP],
    OwnerType.RESEARCHER.value: PROFILE_TABLES[Role.RESEARCHER],
}

OWNER_TYPES: dict[Role, OwnerType] = {
    Role.STARTUP: OwnerType.STARTUP,
    Role.RESEARCHER: OwnerType.RESEARCHER,
}

REVIEWER_TABLE = PROFILE_TABLES[Role.IPR_PROFESSIONAL]

REVIEW_RESET = {
    "status": FilingStatus.PENDING.value,
    "reviewer_id": None,
    "review_message": None,
    "transaction_hash": None,
}


def owner_summary(owner_type: str, profile: dict[str, Any] | None) -> dict[str, Any] | None:
    """Name and email of an owner profile; startups are named by startupName."""
    if not profile:
        return None
    summary = {"id": profile["id"], "email": profile.get("email")}
    if owner_type == OwnerType.STARTUP.value:
        summary["startupName"] = profile.get("name")
    else:
        summary["name"] = profile.get("name")
    return summary


def _profiles_by_id(table: str, ids: Iterable[str]) -> dict[str, dict[str, Any]]:
    ids = sorted({str(i) for i in ids if i})
    if not ids:
        return {}
    rows = SupabaseClient.fetch_many(table, filters={"id": ids}, order_by=None)
    return {str(row["id"]): row for row in rows}


class IprService:
    """
    Service for IP filing operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create(user_id: str, role: Role, data: IprCreate) -> dict[str, Any]:
        """
        File a new Pending IP filing owned by the caller's profile.

        Raises:
            ProfileNotFoundError: If the caller has no startup/researcher profile
        """
        profile = UserService.require_profile(user_id, role)
        now = utc_now_iso()

        filing = SupabaseClient.insert(TABLE, {
            "title": data.title,
            "description": data.description,
            "type": data.type.value,
            "owner_type": OWNER_TYPES[role].value,
            "owner_id": profile["id"],
            "filing_date": now,
            "status": FilingStatus.PENDING.value,
            "related_documents": [doc.model_dump() for doc in data.related_documents],
            "transaction_hash": None,
            "updated_at": now,
        })

        logger.info(f"Created {data.type.value} filing {filing['id']} for {role.value} {profile['id']}")
        return filing

    @staticmethod
    def get(filing_id: str) -> dict[str, Any]:
        """
        Fetch a filing.

        Raises:
            RecordNotFoundError: If it doesn't exist
        """
        filing = SupabaseClient.fetch_by_id(TABLE, filing_id)
        if not filing:
            raise RecordNotFoundError("IPR filing", filing_id)
        return filing

    @staticmethod
    def get_with_owner(filing_id: str) -> dict[str, Any]:
        """A filing with its owner's summary."""
        filing = IprService.get(filing_id)
        table = OWNER_TABLES.get(filing.get("owner_type"))
        owner = SupabaseClient.fetch_by_id(table, filing["owner_id"]) if table else None
        return {**filing, "owner": owner_summary(filing.get("owner_type"), owner)}

    @staticmethod
    def list_mine(user_id: str, role: Role) -> list[dict[str, Any]]:
        """
        The caller's filings with reviewer name/email.

        Raises:
            ProfileNotFoundError: If the caller has no startup/researcher profile
        """
        profile = UserService.require_profile(user_id, role)
        filings = SupabaseClient.fetch_many(
            TABLE,
            filters={"owner_id": profile["id"], "owner_type": OWNER_TYPES[role].value},
            order_by="filing_date",
            desc=True,
        )

        reviewers = _profiles_by_id(REVIEWER_TABLE, (f.get("reviewer_id") for f in filings))
        for filing in filings:
            reviewer = reviewers.get(str(filing.get("reviewer_id")))
            filing["reviewer"] = (
                {"name": reviewer.get("name"), "email": reviewer.get("email")}
                if reviewer else None
            )
        return filings

    @staticmethod
    def list_by_type(slug: str) -> list[dict[str, Any]]:
        """
        Filings of one type (by URL slug) with owner summaries.

        Raises:
            InvalidFilingTypeError: If the slug is unknown
        """
        filing_type = FILING_TYPE_SLUGS.get(slug)
        if filing_type is None:
            raise InvalidFilingTypeError(slug, list(FILING_TYPE_SLUGS))

        filings = SupabaseClient.fetch_many(
            TABLE, filters={"type": filing_type.value}, order_by="filing_date", desc=True
        )

        for owner_type, table in OWNER_TABLES.items():
            owned = [f for f in filings if f.get("owner_type") == owner_type]
            owners = _profiles_by_id(table, (f["owner_id"] for f in owned))
            for filing in owned:
                filing["owner"] = owner_summary(owner_type, owners.get(str(filing["owner_id"])))
        return filings

    @staticmethod
    def owner_user_id(filing: dict[str, Any]) -> str | None:
        """users.id of the filing's owner, via the owner profile."""
        table = OWNER_TABLES.get(filing.get("owner_type"))
        if not table:
            return None
        owner = SupabaseClient.fetch_by_id(table, filing["owner_id"], columns="id, user_id")
        return str(owner["user_id"]) if owner else None

    # -------------------------------------------------------------------------
    # Review
    # -------------------------------------------------------------------------

    @staticmethod
    def review(
        filing_id: str,
        reviewer_user_id: str,
        status: FilingStatus,
        message: str = "",
    ) -> tuple[dict[str, Any], str | None]:
        """
        Record a reviewer's decision on a Pending filing.

        Returns:
            Tuple of (updated filing, ledger task id or None)

        Raises:
            ProfileNotFoundError: If the reviewer has no IP professional profile
            RecordNotFoundError: If the filing doesn't exist
            StatusTransitionError: If the filing is no longer Pending
            TaskQueueError: If the ledger task cannot be queued
        """
        reviewer = UserService.require_profile(reviewer_user_id, Role.IPR_PROFESSIONAL)

        filing = SupabaseClient.update_where_status(TABLE, filing_id, FilingStatus.PENDING.value, {
            "status": status.value,
            "reviewer_id": reviewer["id"],
            "review_message": message,
            "transaction_hash": WAITING_HASH,
            "updated_at": utc_now_iso(),
        })
        if filing is None:
            current = IprService.get(filing_id)
            raise StatusTransitionError(
                "IPR filing", filing_id, current.get("status"), status.value, FilingStatus.PENDING.value
            )

        logger.info(f"Filing {filing_id} marked {status.value} by reviewer {reviewer['id']}")

        if not settings.ledger_enabled:
            IprService.notify_owner(filing)
            return filing, None

        try:
            from workers.tasks import record_ipr_decision

            result = record_ipr_decision.delay(
                filing_id=filing_id,
                status=status.value,
                message=message,
            )
        except Exception as e:
            logger.exception(f"Failed to queue ledger task for filing {filing_id}: {e}")
            IprService.revert_decision(filing_id)
            raise TaskQueueError("record_ipr_decision", str(e))

        return filing, result.id

    @staticmethod
    def record_transaction_hash(filing_id: str, transaction_hash: str) -> dict[str, Any]:
        """
        Store a hash produced by the reviewer's own wallet.

        Raises:
            RecordNotFoundError: If the filing doesn't exist
            StatusTransitionError: If the filing hasn't been reviewed
        """
        filing = SupabaseClient.update_where(
            TABLE,
            filing_id,
            {"status": [FilingStatus.ACCEPTED.value, FilingStatus.REJECTED.value]},
            {"transaction_hash": transaction_hash, "updated_at": utc_now_iso()},
        )
        if filing is None:
            current = IprService.get(filing_id)
            raise StatusTransitionError(
                "IPR filing", filing_id, current.get("status"), "recorded", "Accepted or Rejected"
            )

        logger.info(f"Recorded transaction {transaction_hash} for filing {filing_id}")
        return filing

    @staticmethod
    def notify_owner(filing: dict[str, Any]) -> None:
        """Tell the owner their filing was decided."""
        owner_user_id = IprService.owner_user_id(filing)
        if not owner_user_id:
            logger.warning(f"No owner user for filing {filing['id']}, skipping notification")
            return

        message = f'Your {filing["type"]} filing "{filing["title"]}" was {filing["status"].lower()}.'
        if filing.get("review_message"):
            message += f" Reviewer note: {filing['review_message']}"
        NotificationService.add(
            owner_user_id,
            name=f"IPR {filing['status']}",
            message=message,
            role=filing["owner_type"].lower(),
        )

    # -------------------------------------------------------------------------
    # Ledger Outcomes (called from workers)
    # -------------------------------------------------------------------------

    @staticmethod
    def complete_decision(filing_id: str, transaction_hash: str) -> dict[str, Any] | None:
        """
        Replace the WAITING sentinel with the mined transaction hash.

        Returns:
            Updated filing, or None if the filing no longer waits on the ledger
        """
        return SupabaseClient.update_where(
            TABLE,
            filing_id,
            {"transaction_hash": WAITING_HASH},
            {"transaction_hash": transaction_hash, "updated_at": utc_now_iso()},
        )

    @staticmethod
    def revert_decision(filing_id: str) -> dict[str, Any] | None:
        """
        Put a filing still waiting on the ledger back to Pending.

        Clears the reviewer, message and hash so the filing can be reviewed again.

        Returns:
            Updated filing, or None if it was not waiting on the ledger
        """
        filing = SupabaseClient.update_where(
            TABLE,
            filing_id,
            {"transaction_hash": WAITING_HASH},
            {**REVIEW_RESET, "updated_at": utc_now_iso()},
        )
        if filing:
            logger.info(f"Reverted filing {filing_id} to Pending")
        return filing

    @staticmethod
    def reviewer_user_id(reviewer_profile_id: str | None) -> str | None:
        """users.id of a reviewer profile."""
        if not reviewer_profile_id:
            return None
        reviewer = SupabaseClient.fetch_by_id(REVIEWER_TABLE, reviewer_profile_id, columns="id, user_id")
        return str(reviewer["user_id"]) if reviewer else None
