# =============================================================================
# core/services/research_service.py - Research Papers
# =============================================================================
# researcher_id is the researchers profile id. Drafts are only visible to
# their owner; the public catalogue lists published papers with the
# researcher's name and institution.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from core.models.research import PaperCreate, PaperUpdate, PublishRequest
from core.models.users import PROFILE_TABLES, Role
from core.services.user_service import UserService
from app.exceptions import RecordNotFoundError, StatusTransitionError

logger = logging.getLogger(__name__)

TABLE = "research_papers"
RESEARCHER_TABLE = PROFILE_TABLES[Role.RESEARCHER]


def researcher_summary(profile: dict[str, Any] | None) -> dict[str, Any] | None:
    """Catalogue fields of a researcher profile, read from its approved form."""
    if not profile:
        return None
    info = (profile.get("details") or {}).get("personalInfo") or {}
    return {
        "id": profile["id"],
        "name": profile.get("name") or info.get("fullName"),
        "institution": info.get("institution"),
        "department": info.get("department"),
        "designation": info.get("designation"),
    }


class ResearchService:
    """
    Service for research papers.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create(user_id: str, data: PaperCreate) -> dict[str, Any]:
        """
        Store a draft paper owned by the caller's researcher profile.

        Raises:
            ProfileNotFoundError: If the caller has no researcher profile
        """
        researcher = UserService.require_profile(user_id, Role.RESEARCHER)
        now = utc_now_iso()

        paper = SupabaseClient.insert(TABLE, {
            "researcher_id": researcher["id"],
            "title": data.title,
            "description": data.description,
            "publication_date": data.publication_date.isoformat(),
            "stage": data.stage.value,
            "doi": data.doi,
            "images": [image.model_dump() for image in data.images],
            "is_published": False,
            "is_free": data.is_free,
            "price": data.price,
            "downloads": 0,
            "updated_at": now,
        })

        logger.info(f"Researcher {researcher['id']} created paper {paper['id']}")
        return paper

    @staticmethod
    def list_mine(user_id: str) -> list[dict[str, Any]]:
        """
        The caller's papers, drafts included, newest first.

        Raises:
            ProfileNotFoundError: If the caller has no researcher profile
        """
        researcher = UserService.require_profile(user_id, Role.RESEARCHER)
        return SupabaseClient.fetch_many(
            TABLE, filters={"researcher_id": researcher["id"]}, desc=True
        )

    @staticmethod
    def get_owned(paper_id: str, user_id: str) -> dict[str, Any]:
        """
        One of the caller's papers.

        Raises:
            ProfileNotFoundError: If the caller has no researcher profile
            RecordNotFoundError: If it doesn't exist or belongs to someone else
        """
        researcher = UserService.require_profile(user_id, Role.RESEARCHER)
        paper = SupabaseClient.fetch_by_id(TABLE, paper_id)
        if not paper or str(paper.get("researcher_id")) != str(researcher["id"]):
            raise RecordNotFoundError("Research paper", paper_id)
        return paper

    @staticmethod
    def update(paper_id: str, user_id: str, data: PaperUpdate) -> dict[str, Any]:
        """
        Change the fields sent in `data` on one of the caller's papers.

        Raises:
            ProfileNotFoundError: If the caller has no researcher profile
            RecordNotFoundError: If it doesn't exist or belongs to someone else
        """
        paper = ResearchService.get_owned(paper_id, user_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        if not changes:
            return paper

        updated = SupabaseClient.update_where(
            TABLE,
            paper_id,
            {"researcher_id": paper["researcher_id"]},
            {**changes, "updated_at": utc_now_iso()},
        )
        if updated is None:
            raise RecordNotFoundError("Research paper", paper_id)

        logger.info(f"Updated paper {paper_id}: {sorted(changes)}")
        return updated

    @staticmethod
    def delete(paper_id: str, user_id: str) -> None:
        """
        Delete one of the caller's papers.

        Raises:
            ProfileNotFoundError: If the caller has no researcher profile
            RecordNotFoundError: If it doesn't exist or belongs to someone else
        """
        ResearchService.get_owned(paper_id, user_id)
        if not SupabaseClient.delete(TABLE, paper_id):
            raise RecordNotFoundError("Research paper", paper_id)
        logger.info(f"Deleted paper {paper_id}")

    @staticmethod
    def publish(paper_id: str, user_id: str, pricing: PublishRequest) -> dict[str, Any]:
        """
        Publish a draft with its pricing.

        Raises:
            ProfileNotFoundError: If the caller has no researcher profile
            RecordNotFoundError: If it doesn't exist or belongs to someone else
            StatusTransitionError: If it is already published
        """
        paper = ResearchService.get_owned(paper_id, user_id)
        now = utc_now_iso()

        published = SupabaseClient.update_where(
            TABLE,
            paper_id,
            {"researcher_id": paper["researcher_id"], "is_published": False},
            {
                "is_published": True,
                "is_free": pricing.is_free,
                "price": pricing.price,
                "published_at": now,
                "updated_at": now,
            },
        )
        if published is None:
            raise StatusTransitionError("Research paper", paper_id, "published", "published", "draft")

        price = "free" if pricing.is_free else f"at {pricing.price:,.2f}"
        logger.info(f"Published paper {paper_id} {price}")
        return published

    # -------------------------------------------------------------------------
    # Public Catalogue
    # -------------------------------------------------------------------------

    @staticmethod
    def list_published() -> list[dict[str, Any]]:
        """Published papers, most recently published first, with researcher summaries."""
        papers = SupabaseClient.fetch_many(
            TABLE, filters={"is_published": True}, order_by="published_at", desc=True
        )

        researcher_ids = sorted({str(p["researcher_id"]) for p in papers})
        researchers = {
            str(r["id"]): r for r in SupabaseClient.fetch_many(
                RESEARCHER_TABLE,
                filters={"id": researcher_ids},
                columns="id, name, details",
                order_by=None,
            )
        } if researcher_ids else {}

        for paper in papers:
            paper["researcher"] = researcher_summary(researchers.get(str(paper["researcher_id"])))
        return papers

    @staticmethod
    def get_published(paper_id: str) -> dict[str, Any]:
        """
        A published paper with its researcher summary.

        Raises:
            RecordNotFoundError: If it doesn't exist or is still a draft
        """
        paper = SupabaseClient.fetch_by_id(TABLE, paper_id)
        if not paper or not paper.get("is_published"):
            raise RecordNotFoundError("Research paper", paper_id)

        researcher = SupabaseClient.fetch_by_id(
            RESEARCHER_TABLE, paper["researcher_id"], columns="id, name, details"
        )
        return {**paper, "researcher": researcher_summary(researcher)}
