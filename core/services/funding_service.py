# =============================================================================
# core/services/funding_service.py - Funding Requests
# =============================================================================
# startup_id and agency_id are profile ids (startups.id,
# funding_agencies.id). Agencies only ever see and act on requests
# addressed to their own profile.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from core.models.funding import (
    FUNDING_TRANSITIONS,
    FundingAction,
    FundingRequestCreate,
    FundingStatus,
)
from core.models.users import PROFILE_TABLES, Role
from core.services.notification_service import NotificationService
from core.services.user_service import UserService
from app.exceptions import RecordNotFoundError, StatusTransitionError

logger = logging.getLogger(__name__)

TABLE = "funding_requests"
AGENCY_TABLE = PROFILE_TABLES[Role.FUNDING_AGENCY]
STARTUP_TABLE = PROFILE_TABLES[Role.STARTUP]


def agency_summary(agency: dict[str, Any]) -> dict[str, Any]:
    """Listing fields of an agency profile, pulled out of its form details."""
    details = agency.get("details") or {}
    agency_details = details.get("agencyDetails") or {}
    preferences = details.get("fundingPreferences") or {}
    return {
        "id": agency["id"],
        "name": agency.get("name"),
        "email": agency.get("email"),
        "type": agency_details.get("type"),
        "description": agency_details.get("description"),
        "funding_types": preferences.get("fundingTypes", []),
        "investment_range": preferences.get("investmentRange"),
    }


class FundingService:
    """
    Service for funding agencies and funding requests.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Agencies
    # -------------------------------------------------------------------------

    @staticmethod
    def list_agencies() -> list[dict[str, Any]]:
        """All funding agencies, by name."""
        agencies = SupabaseClient.fetch_many(AGENCY_TABLE, order_by="name")
        return [agency_summary(a) for a in agencies]

    @staticmethod
    def get_agency(agency_id: str) -> dict[str, Any]:
        """
        One agency with its full details.

        Raises:
            RecordNotFoundError: If it doesn't exist
        """
        agency = SupabaseClient.fetch_by_id(AGENCY_TABLE, agency_id)
        if not agency:
            raise RecordNotFoundError("Funding agency", agency_id)
        return {**agency_summary(agency), "details": agency.get("details") or {}}

    # -------------------------------------------------------------------------
    # Startup Side
    # -------------------------------------------------------------------------

    @staticmethod
    def create_request(
        user_id: str,
        agency_id: str,
        data: FundingRequestCreate,
    ) -> dict[str, Any]:
        """
        Send a pending funding request to an agency.

        Raises:
            ProfileNotFoundError: If the caller has no startup profile
            RecordNotFoundError: If the agency doesn't exist
        """
        startup = UserService.require_profile(user_id, Role.STARTUP)
        agency = SupabaseClient.fetch_by_id(AGENCY_TABLE, agency_id)
        if not agency:
            raise RecordNotFoundError("Funding agency", agency_id)

        now = utc_now_iso()
        request = SupabaseClient.insert(TABLE, {
            "startup_id": startup["id"],
            "agency_id": agency["id"],
            "amount": data.amount,
            "funding_type": data.funding_type.value,
            "message": data.message,
            "status": FundingStatus.PENDING.value,
            "updated_at": now,
        })

        NotificationService.add(
            agency["user_id"],
            name="New funding request",
            message=f"{startup.get('name') or 'A startup'} requested {data.amount:,.2f} ({data.funding_type.value}).",
            role=Role.FUNDING_AGENCY.value,
        )

        logger.info(f"Startup {startup['id']} requested funding from agency {agency['id']}")
        return request

    @staticmethod
    def list_for_startup(user_id: str) -> list[dict[str, Any]]:
        """
        The caller's requests with agency names, newest first.

        Raises:
            ProfileNotFoundError: If the caller has no startup profile
        """
        startup = UserService.require_profile(user_id, Role.STARTUP)
        requests = SupabaseClient.fetch_many(
            TABLE, filters={"startup_id": startup["id"]}, desc=True
        )

        agency_ids = sorted({str(r["agency_id"]) for r in requests})
        agencies = {
            str(a["id"]): a for a in SupabaseClient.fetch_many(
                AGENCY_TABLE, filters={"id": agency_ids}, columns="id, name", order_by=None
            )
        } if agency_ids else {}

        for request in requests:
            agency = agencies.get(str(request["agency_id"]))
            request["agency_name"] = agency.get("name") if agency else None
        return requests

    @staticmethod
    def set_fundraising(user_id: str, is_actively_fundraising: bool) -> dict[str, Any]:
        """
        Toggle the caller's fundraising flag.

        Raises:
            ProfileNotFoundError: If the caller has no startup profile
        """
        startup = UserService.require_profile(user_id, Role.STARTUP)
        updated = SupabaseClient.update(
            STARTUP_TABLE, startup["id"], {"is_actively_fundraising": is_actively_fundraising}
        )
        logger.info(f"Startup {startup['id']} fundraising={is_actively_fundraising}")
        return updated or {**startup, "is_actively_fundraising": is_actively_fundraising}

    # -------------------------------------------------------------------------
    # Agency Side
    # -------------------------------------------------------------------------

    @staticmethod
    def list_for_agency(
        user_id: str,
        status: FundingStatus | None = None,
    ) -> list[dict[str, Any]]:
        """
        Requests addressed to the caller's agency, newest first, with startup summaries.

        Raises:
            ProfileNotFoundError: If the caller has no funding agency profile
        """
        agency = UserService.require_profile(user_id, Role.FUNDING_AGENCY)
        filters: dict[str, Any] = {"agency_id": agency["id"]}
        if status:
            filters["status"] = status.value

        requests = SupabaseClient.fetch_many(TABLE, filters=filters, desc=True)

        startup_ids = sorted({str(r["startup_id"]) for r in requests})
        startups = {
            str(s["id"]): s for s in SupabaseClient.fetch_many(
                STARTUP_TABLE,
                filters={"id": startup_ids},
                columns="id, name, email, is_actively_fundraising",
                order_by=None,
            )
        } if startup_ids else {}

        for request in requests:
            request["startup"] = startups.get(str(request["startup_id"]))
        return requests

    @staticmethod
    def act(user_id: str, request_id: str, action: FundingAction) -> dict[str, Any]:
        """
        Accept, reject or mark a request transferred.

        Raises:
            ProfileNotFoundError: If the caller has no funding agency profile
            RecordNotFoundError: If the request doesn't exist or isn't the caller's
            StatusTransitionError: If the request isn't in the required status
        """
        agency = UserService.require_profile(user_id, Role.FUNDING_AGENCY)
        required, target = FUNDING_TRANSITIONS[action]

        request = SupabaseClient.fetch_by_id(TABLE, request_id)
        if not request or str(request.get("agency_id")) != str(agency["id"]):
            raise RecordNotFoundError("Funding request", request_id)

        updated = SupabaseClient.update_where(
            TABLE,
            request_id,
            {"status": required.value, "agency_id": agency["id"]},
            {"status": target.value, "updated_at": utc_now_iso()},
        )
        if updated is None:
            current = SupabaseClient.fetch_by_id(TABLE, request_id) or request
            raise StatusTransitionError(
                "Funding request", request_id, current.get("status"), target.value, required.value
            )

        startup = SupabaseClient.fetch_by_id(STARTUP_TABLE, updated["startup_id"], columns="id, user_id")
        if startup:
            NotificationService.add(
                startup["user_id"],
                name=f"Funding request {target.value}",
                message=f"{agency.get('name') or 'The agency'} marked your funding request of {updated['amount']} as {target.value}.",
                role=Role.STARTUP.value,
            )

        logger.info(f"Agency {agency['id']} moved request {request_id} to {target.value}")
        return updated
