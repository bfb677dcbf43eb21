# =============================================================================
# app/routers/research.py - Research Paper Endpoints
# =============================================================================
# Researchers manage their own papers; anyone can browse published ones.
#
#   GET  /research-papers               published catalogue (no auth)
#   GET  /research-papers/{id}          one published paper (no auth)
#   /research-papers/mine, POST, PATCH, DELETE, /{id}/publish   researcher role
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel

from app.auth import require_role, AuthUser
from core.models.research import PaperCreate, PaperUpdate, PublishRequest, ResearchPaper
from core.models.users import Role
from core.services.research_service import ResearchService

router = APIRouter()

ResearcherUser = Annotated[AuthUser, Depends(require_role(Role.RESEARCHER))]
PaperId = Annotated[UUID, Path(description="Research paper UUID")]


# =============================================================================
# Response Models
# =============================================================================

class ResearchPaperResponse(ResearchPaper):
    researcher: dict[str, Any] | None = None


class ResearchPaperList(BaseModel):
    papers: list[ResearchPaperResponse]
    count: int


def _paper_list(papers: list[dict]) -> ResearchPaperList:
    return ResearchPaperList(
        papers=[ResearchPaperResponse(**p) for p in papers],
        count=len(papers),
    )


# =============================================================================
# Public Catalogue
# =============================================================================

@router.get("", response_model=ResearchPaperList)
async def list_published_papers():
    """Published papers with researcher name and institution."""
    return _paper_list(ResearchService.list_published())


# =============================================================================
# Researcher Endpoints
# =============================================================================

@router.get("/mine", response_model=ResearchPaperList)
async def list_my_papers(user: ResearcherUser):
    """
    The caller's papers, drafts included, newest first.

    Raises:
        404: The caller has no researcher profile
    """
    return _paper_list(ResearchService.list_mine(str(user.id)))


@router.post("", response_model=ResearchPaperResponse, status_code=status.HTTP_201_CREATED)
async def create_paper(request: PaperCreate, user: ResearcherUser):
    """
    Add a paper as a draft. Publish it with POST /research-papers/{id}/publish.

    Raises:
        404: The caller has no researcher profile
    """
    return ResearchPaperResponse(**ResearchService.create(str(user.id), request))


@router.get("/{paper_id}", response_model=ResearchPaperResponse)
async def get_published_paper(paper_id: PaperId):
    """
    Get a published paper.

    Raises:
        404: Paper not found or not published
    """
    return ResearchPaperResponse(**ResearchService.get_published(str(paper_id)))


@router.patch("/{paper_id}", response_model=ResearchPaperResponse)
async def update_paper(paper_id: PaperId, request: PaperUpdate, user: ResearcherUser):
    """
    Edit one of the caller's papers.

    Raises:
        404: Paper not found or owned by another researcher
    """
    return ResearchPaperResponse(**ResearchService.update(str(paper_id), str(user.id), request))


@router.delete("/{paper_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_paper(paper_id: PaperId, user: ResearcherUser):
    """
    Delete one of the caller's papers.

    Raises:
        404: Paper not found or owned by another researcher
    """
    ResearchService.delete(str(paper_id), str(user.id))


@router.post("/{paper_id}/publish", response_model=ResearchPaperResponse)
async def publish_paper(paper_id: PaperId, request: PublishRequest, user: ResearcherUser):
    """
    Publish a draft, free or at a price.

    Raises:
        404: Paper not found or owned by another researcher
        409: Paper is already published
        422: Paid without a positive price
    """
    return ResearchPaperResponse(**ResearchService.publish(str(paper_id), str(user.id), request))
