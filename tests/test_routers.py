# =============================================================================
# tests/test_routers.py - API Endpoint Tests
# =============================================================================
# Tests for the HTTP layer: routing, role gates, status codes and error
# responses. Services are mocked at the router module, so these check how
# endpoints call services and shape their responses.
#
# Run with: pytest tests/test_routers.py -v
# =============================================================================

from unittest.mock import patch

from app.exceptions import (
    DuplicateReviewError,
    RecordNotFoundError,
    StatusTransitionError,
)
from core.models.users import Role
from lib.messages import chat_id
from lib.similarity import SimilarityScore

from tests.conftest import OTHER_USER_ID, USER_ID

SUBMISSION_ID = "5ab00000-0000-0000-0000-000000000001"
FILING_ID = "f0000000-0000-0000-0000-000000000001"
AGENCY_ID = "a0000000-0000-0000-0000-000000000001"
REQUEST_ID = "e0000000-0000-0000-0000-000000000001"
MISSING_ID = "00000000-0000-0000-0000-000000000404"


def submission(**overrides) -> dict:
    return {
        "id": "sub-1",
        "user_id": USER_ID,
        "form_type": "mentor",
        "status": "pending",
        "form_data": {"name": "Anita"},
        "files": [],
        **overrides,
    }


# =============================================================================
# Health & Root
# =============================================================================

class TestHealth:
    def test_health(self, anonymous_client):
        response = anonymous_client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["ledger_enabled"] is False

    def test_root(self, anonymous_client):
        assert anonymous_client.get("/").json()["name"] == "InnovateHub API"


# =============================================================================
# Forms & Admin Review
# =============================================================================

class TestForms:
    """Tests for form submission endpoints."""

    def test_invalid_form_returns_field_errors(self, make_client):
        """Test that schema errors come back as 422 with details.errors."""
        client = make_client()

        response = client.post("/api/v1/forms/mentor", json={"name": "A"})

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "FORM_VALIDATION_ERROR"
        assert body["details"]["errors"]

    def test_no_policy_maker_form(self, make_client):
        response = make_client().post("/api/v1/forms/policyMaker", json={})

        assert response.status_code == 422

    @patch("app.routers.forms.FormService")
    def test_submit(self, mock_service, make_client):
        mock_service.submit.return_value = submission()

        response = make_client().post("/api/v1/forms/mentor", json={"name": "Anita"})

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

    @patch("app.routers.forms.FormService")
    def test_list_mine(self, mock_service, make_client):
        mock_service.list_mine.return_value = [submission(), submission(id="sub-2")]

        response = make_client().get("/api/v1/forms/mine")

        assert response.json()["count"] == 2


class TestAdmin:
    """Tests for admin-only endpoints."""

    @patch("app.routers.admin.FormService")
    def test_approve(self, mock_service, make_client):
        mock_service.approve.return_value = submission(status="approved", profile_id="p1")

        response = make_client(Role.ADMIN).post(f"/api/v1/admin/forms/{SUBMISSION_ID}/approve")

        assert response.status_code == 200
        assert response.json()["profile_id"] == "p1"

    @patch("app.routers.admin.FormService")
    def test_reject_passes_reason(self, mock_service, make_client):
        mock_service.reject.return_value = submission(status="rejected", rejection_reason="Missing CV")

        response = make_client(Role.ADMIN).post(
            f"/api/v1/admin/forms/{SUBMISSION_ID}/reject", json={"reason": "Missing CV"}
        )

        assert response.status_code == 200
        mock_service.reject.assert_called_once_with(SUBMISSION_ID, "Missing CV")

    @patch("app.routers.admin.FormService")
    def test_approve_already_reviewed(self, mock_service, make_client):
        """Test that a double approval surfaces as 409."""
        mock_service.approve.side_effect = StatusTransitionError(
            "Form submission", "sub-1", "approved", "approved", "pending"
        )

        response = make_client(Role.ADMIN).post(f"/api/v1/admin/forms/{SUBMISSION_ID}/approve")

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATUS_TRANSITION"

    def test_unknown_action(self, make_client):
        response = make_client(Role.ADMIN).post(f"/api/v1/admin/forms/{SUBMISSION_ID}/archive")

        assert response.status_code == 422

    @patch("app.routers.admin.FormService")
    def test_delete(self, mock_service, make_client):
        response = make_client(Role.ADMIN).delete(f"/api/v1/admin/forms/{SUBMISSION_ID}")

        assert response.status_code == 204
        mock_service.delete.assert_called_once_with(SUBMISSION_ID)

    @patch("app.routers.admin.UserService")
    def test_list_users(self, mock_service, make_client):
        mock_service.list_users.return_value = ([{"id": USER_ID, "name": "Asha", "role": "startup"}], 1)

        response = make_client(Role.ADMIN).get("/api/v1/admin/users?role=startup&page=1&page_size=10")

        assert response.status_code == 200
        assert response.json()["total"] == 1
        mock_service.list_users.assert_called_once_with(role=Role.STARTUP, page=1, page_size=10)

    @patch("app.routers.admin.UserService")
    def test_promote_policy_maker(self, mock_service, make_client):
        mock_service.change_policy_maker_role.return_value = {"id": OTHER_USER_ID, "role": "policyMaker"}

        response = make_client(Role.ADMIN).put(
            f"/api/v1/admin/users/{OTHER_USER_ID}/role", json={"role": "policyMaker"}
        )

        assert response.status_code == 200
        assert response.json()["role"] == "policyMaker"


# =============================================================================
# IP Filings
# =============================================================================

class TestIpr:
    """Tests for filing and review endpoints."""

    def test_plain_user_cannot_file(self, make_client):
        response = make_client(Role.USER).post(
            "/api/v1/ipr", json={"title": "T", "description": "D", "type": "Patent"}
        )

        assert response.status_code == 401

    @patch("app.routers.ipr.IprService")
    def test_create(self, mock_service, make_client, pending_filing):
        mock_service.create.return_value = pending_filing

        response = make_client(Role.RESEARCHER).post(
            "/api/v1/ipr", json={"title": "T", "description": "D", "type": "Patent"}
        )

        assert response.status_code == 201
        assert mock_service.create.call_args.args[1] == Role.RESEARCHER

    def test_review_pending_is_rejected(self, make_client):
        """Test that 'Pending' is not accepted as a review decision."""
        response = make_client(Role.IPR_PROFESSIONAL).post(
            f"/api/v1/ipr/{FILING_ID}/review", json={"status": "Pending"}
        )

        assert response.status_code == 422

    @patch("app.routers.ipr.IprService")
    def test_review_without_ledger(self, mock_service, make_client, pending_filing):
        decided = {**pending_filing, "status": "Accepted", "transaction_hash": "WAITING"}
        mock_service.review.return_value = (decided, None)

        response = make_client(Role.IPR_PROFESSIONAL).post(
            f"/api/v1/ipr/{FILING_ID}/review", json={"status": "Accepted", "message": "Novel"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["task_id"] is None
        assert body["filing"]["transaction_hash"] == "WAITING"
        assert "transaction hash" in body["message"]

    @patch("app.routers.ipr.IprService")
    def test_review_with_ledger_task(self, mock_service, make_client, pending_filing):
        mock_service.review.return_value = ({**pending_filing, "status": "Rejected"}, "task-9")

        response = make_client(Role.IPR_PROFESSIONAL).post(
            f"/api/v1/ipr/{FILING_ID}/review", json={"status": "Rejected"}
        )

        assert response.json()["task_id"] == "task-9"

    def test_admin_cannot_review(self, make_client):
        response = make_client(Role.ADMIN).post(f"/api/v1/ipr/{FILING_ID}/review", json={"status": "Accepted"})

        assert response.status_code == 401

    def test_bad_transaction_hash(self, make_client):
        response = make_client(Role.IPR_PROFESSIONAL).post(
            f"/api/v1/ipr/{FILING_ID}/transaction-hash", json={"transaction_hash": "0x123"}
        )

        assert response.status_code == 422

    @patch("app.routers.ipr.IprService")
    def test_get_missing_filing(self, mock_service, make_client):
        mock_service.get_with_owner.side_effect = RecordNotFoundError("IPR filing", "f404")

        response = make_client().get(f"/api/v1/ipr/{MISSING_ID}")

        assert response.status_code == 404
        assert response.json()["code"] == "IPR_FILING_NOT_FOUND"

    @patch("app.routers.ipr.IprService")
    def test_malformed_filing_id(self, mock_service, make_client):
        """Test that a non-UUID path id is a 422 before any lookup."""
        response = make_client().get("/api/v1/ipr/not-a-uuid")

        assert response.status_code == 422
        mock_service.get_with_owner.assert_not_called()

    @patch("app.routers.admin.FormService")
    def test_malformed_submission_id(self, mock_service, make_client):
        response = make_client(Role.ADMIN).post("/api/v1/admin/forms/sub-1/approve")

        assert response.status_code == 422
        mock_service.approve.assert_not_called()

    @patch("app.routers.ipr.SimilarityService")
    def test_queue_similarity(self, mock_service, make_client):
        mock_service.enqueue_analysis.return_value = "task-sim"

        response = make_client(Role.IPR_PROFESSIONAL).post(f"/api/v1/ipr/{FILING_ID}/similarity")

        assert response.status_code == 200
        assert response.json() == {
            "task_id": "task-sim",
            "status": "PENDING",
            "message": "Similarity analysis queued. Use GET /api/v1/tasks/{task_id} to check status.",
        }


class TestSimilarityCompare:
    @patch("app.routers.similarity.SimilarityService")
    def test_compare(self, mock_service, make_client):
        mock_service.compare.return_value = SimilarityScore(
            title_similarity=67, description_similarity=40, source="heuristic"
        )

        response = make_client(Role.IPR_PROFESSIONAL).post(
            "/api/v1/similarity/compare",
            json={"pending": {"title": "solar roof tile"}, "accepted": {"title": "roof tile"}},
        )

        assert response.status_code == 200
        assert response.json()["overall"] == 54
        assert response.json()["source"] == "heuristic"


# =============================================================================
# Messages
# =============================================================================

class TestMessages:
    """Tests for message endpoints."""

    @patch("app.routers.messages.MessageService")
    def test_send(self, mock_service, make_client):
        mock_service.send.return_value = {
            "id": "m1",
            "sender_id": USER_ID,
            "receiver_id": OTHER_USER_ID,
            "content": "hello",
            "chat_id": chat_id(USER_ID, OTHER_USER_ID),
            "created_at": "2024-01-01T10:00:00+00:00",
            "sender": {"id": USER_ID, "name": "Asha", "role": "startup"},
        }

        response = make_client().post(
            "/api/v1/messages", json={"receiver_id": OTHER_USER_ID, "content": "hello"}
        )

        assert response.status_code == 201
        assert response.json()["sender"]["name"] == "Asha"

    @patch("app.routers.messages.MessageService")
    def test_poll(self, mock_service, make_client):
        mock_service.conversation.return_value = []

        response = make_client().get(
            f"/api/v1/messages?receiver_id={OTHER_USER_ID}&after=2024-01-01T10:00:00"
        )

        assert response.status_code == 200
        assert response.json()["chat_id"] == chat_id(USER_ID, OTHER_USER_ID)
        assert mock_service.conversation.call_args.kwargs["after"] == "2024-01-01T10:00:00"

    def test_stream_other_peoples_chat(self, make_client):
        """Test that only participants can open a chat stream."""
        response = make_client().get(
            "/api/v1/messages/stream?chat_id=33333333-3333-3333-3333-333333333333_"
            "44444444-4444-4444-4444-444444444444"
        )

        assert response.status_code == 403
        assert response.json()["code"] == "CHAT_ACCESS_DENIED"


# =============================================================================
# Funding, Metrics, Notifications
# =============================================================================

class TestFunding:
    def test_startup_cannot_answer_requests(self, make_client):
        response = make_client(Role.STARTUP).post(f"/api/v1/funding-agency/requests/{REQUEST_ID}/accept")

        assert response.status_code == 401

    @patch("app.routers.funding.FundingService")
    def test_request_funding(self, mock_service, make_client):
        mock_service.create_request.return_value = {
            "id": "r1",
            "startup_id": "s1",
            "agency_id": "a1",
            "amount": 250000,
            "funding_type": "Grants",
            "message": "Pilot",
            "status": "pending",
        }

        response = make_client(Role.STARTUP).post(
            f"/api/v1/startup/fundings/request/{AGENCY_ID}",
            json={"amount": 250000, "funding_type": "Grants", "message": "Pilot"},
        )

        assert response.status_code == 201
        assert mock_service.create_request.call_args.args[1] == AGENCY_ID

    @patch("app.routers.funding.FundingService")
    def test_list_agencies(self, mock_service, make_client):
        mock_service.list_agencies.return_value = [{"id": "a1", "name": "SeedFund"}]

        response = make_client().get("/api/v1/funding-agencies")

        assert response.json()["count"] == 1


class TestMetrics:
    def test_startup_metrics_default_profile(self, make_client):
        response = make_client().get("/api/v1/startup/metrics?timeframe=yearly&metric=roi")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["timeframe"] == "yearly"
        assert list(data["metrics"]) == ["roi"]

    def test_invalid_timeframe(self, make_client):
        response = make_client().get("/api/v1/startup/metrics?timeframe=weekly")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TIMEFRAME"

    def test_agency_metrics_requires_agency(self, make_client):
        response = make_client(Role.STARTUP).post(
            "/api/v1/funding-agency/metrics", json={"startup_ids": ["s1"]}
        )

        assert response.status_code == 401


class TestNotifications:
    @patch("app.routers.notifications.NotificationService")
    def test_list(self, mock_service, make_client):
        mock_service.list_for_user.return_value = (
            [{"id": "n1", "name": "Hi", "message": "There", "read": False}], 1
        )

        response = make_client().get("/api/v1/notifications?unread_only=true")

        assert response.json()["unread_count"] == 1
        assert mock_service.list_for_user.call_args.args[1] is True

    @patch("app.routers.notifications.NotificationService")
    def test_mark_missing(self, mock_service, make_client):
        mock_service.mark_read.side_effect = RecordNotFoundError("Notification", "n9")

        response = make_client().post(f"/api/v1/notifications/{MISSING_ID}/read")

        assert response.status_code == 404


# =============================================================================
# Research Paper & Policy Endpoints
# =============================================================================

PAPER_ID = "b0000000-0000-0000-0000-000000000001"
POLICY_ID = "c0000000-0000-0000-0000-000000000001"


def paper(**overrides) -> dict:
    return {
        "id": PAPER_ID,
        "researcher_id": "researcher-1",
        "title": "Stable perovskite cells",
        "description": "Encapsulation that survives damp heat",
        "publication_date": "2024-02-10",
        "stage": "Completed",
        **overrides,
    }


def policy(**overrides) -> dict:
    return {
        "id": POLICY_ID,
        "title": "Startup Gujarat 2025",
        "description": "Support scheme",
        "vision": "A startup in every district",
        "objectives": ["Seed grants"],
        "sectors": ["Clean Tech"],
        "industries": ["Renewable Energy"],
        **overrides,
    }


class TestResearchPapers:
    @patch("app.routers.research.ResearchService")
    def test_catalogue_is_public(self, mock_service, anonymous_client):
        mock_service.list_published.return_value = [
            paper(is_published=True, researcher={"id": "researcher-1", "name": "Dr. Meera Iyer"})
        ]

        response = anonymous_client.get("/api/v1/research-papers")

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert response.json()["papers"][0]["researcher"]["name"] == "Dr. Meera Iyer"

    @patch("app.routers.research.ResearchService")
    def test_create_draft(self, mock_service, make_client):
        mock_service.create.return_value = paper()

        response = make_client(Role.RESEARCHER).post("/api/v1/research-papers", json={
            "title": "Stable perovskite cells",
            "description": "Encapsulation that survives damp heat",
            "publication_date": "2024-02-10",
            "stage": "Completed",
        })

        assert response.status_code == 201
        assert response.json()["is_published"] is False
        assert mock_service.create.call_args.args[0] == USER_ID

    def test_only_researchers_create(self, make_client):
        response = make_client(Role.STARTUP).post("/api/v1/research-papers", json={
            "title": "T", "description": "D", "publication_date": "2024-02-10", "stage": "Completed",
        })

        assert response.status_code == 401

    @patch("app.routers.research.ResearchService")
    def test_publish(self, mock_service, make_client):
        mock_service.publish.return_value = paper(is_published=True, is_free=False, price=499)

        response = make_client(Role.RESEARCHER).post(
            f"/api/v1/research-papers/{PAPER_ID}/publish", json={"is_free": False, "price": 499}
        )

        assert response.status_code == 200
        assert response.json()["price"] == 499
        paper_id, user_id, pricing = mock_service.publish.call_args.args
        assert paper_id == PAPER_ID
        assert pricing.price == 499

    def test_publish_paid_without_price(self, make_client):
        response = make_client(Role.RESEARCHER).post(
            f"/api/v1/research-papers/{PAPER_ID}/publish", json={"is_free": False}
        )

        assert response.status_code == 422

    @patch("app.routers.research.ResearchService")
    def test_publish_twice_conflicts(self, mock_service, make_client):
        mock_service.publish.side_effect = StatusTransitionError(
            "Research paper", PAPER_ID, "published", "published", "draft"
        )

        response = make_client(Role.RESEARCHER).post(
            f"/api/v1/research-papers/{PAPER_ID}/publish", json={"is_free": True}
        )

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATUS_TRANSITION"

    @patch("app.routers.research.ResearchService")
    def test_delete(self, mock_service, make_client):
        response = make_client(Role.RESEARCHER).delete(f"/api/v1/research-papers/{PAPER_ID}")

        assert response.status_code == 204
        mock_service.delete.assert_called_once_with(PAPER_ID, USER_ID)

    @patch("app.routers.research.ResearchService")
    def test_draft_is_not_found_publicly(self, mock_service, anonymous_client):
        mock_service.get_published.side_effect = RecordNotFoundError("Research paper", PAPER_ID)

        response = anonymous_client.get(f"/api/v1/research-papers/{PAPER_ID}")

        assert response.status_code == 404
        assert response.json()["code"] == "RESEARCH_PAPER_NOT_FOUND"


class TestPolicies:
    @patch("app.routers.policies.PolicyService")
    def test_create(self, mock_service, make_client):
        mock_service.create.return_value = policy(created_by="maker-1")

        response = make_client(Role.POLICY_MAKER).post("/api/v1/policies", json={
            "title": "Startup Gujarat 2025",
            "description": "Support scheme",
            "vision": "A startup in every district",
            "objectives": ["Seed grants"],
            "sectors": ["Clean Tech"],
            "industries": ["Renewable Energy"],
        })

        assert response.status_code == 201
        assert response.json()["metrics"]["totalReviews"] == 0

    def test_missing_fields(self, make_client):
        response = make_client(Role.POLICY_MAKER).post("/api/v1/policies", json={"title": "Only a title"})

        assert response.status_code == 422

    def test_startup_cannot_create(self, make_client):
        response = make_client(Role.STARTUP).post("/api/v1/policies", json=policy())

        assert response.status_code == 401

    @patch("app.routers.policies.PolicyService")
    def test_list_for_any_user(self, mock_service, make_client):
        mock_service.list_all.return_value = [
            policy(metrics={"totalReviews": 2, "startupReviews": 2, "researcherReviews": 0, "fundingAgencyReviews": 0})
        ]

        response = make_client().get("/api/v1/policies")

        assert response.status_code == 200
        assert response.json()["policies"][0]["metrics"]["startupReviews"] == 2

    @patch("app.routers.policies.PolicyService")
    def test_review(self, mock_service, make_client):
        mock_service.add_review.return_value = {
            "id": "review-1",
            "policy_id": POLICY_ID,
            "reviewer_id": "startup-1",
            "reviewer_type": "Startup",
            "message": "Helpful",
        }

        response = make_client(Role.STARTUP).post(
            f"/api/v1/policies/{POLICY_ID}/reviews", json={"message": " Helpful "}
        )

        assert response.status_code == 201
        mock_service.add_review.assert_called_once_with(POLICY_ID, USER_ID, Role.STARTUP, "Helpful")

    def test_policy_maker_cannot_review(self, make_client):
        response = make_client(Role.POLICY_MAKER).post(
            f"/api/v1/policies/{POLICY_ID}/reviews", json={"message": "Mine is great"}
        )

        assert response.status_code == 401

    @patch("app.routers.policies.PolicyService")
    def test_second_review_conflicts(self, mock_service, make_client):
        mock_service.add_review.side_effect = DuplicateReviewError(POLICY_ID)

        response = make_client(Role.RESEARCHER).post(
            f"/api/v1/policies/{POLICY_ID}/reviews", json={"message": "Again"}
        )

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_REVIEW"

    @patch("app.routers.policies.PolicyService")
    def test_detail_with_reviews(self, mock_service, make_client):
        mock_service.get_with_reviews.return_value = policy(reviews=[{
            "id": "review-1",
            "policy_id": POLICY_ID,
            "reviewer_id": "agency-1",
            "reviewer_type": "FundingAgency",
            "message": "Clear criteria",
            "reviewer": {"id": "agency-1", "name": "SeedFund"},
        }])

        response = make_client(Role.POLICY_MAKER).get(f"/api/v1/policies/{POLICY_ID}")

        assert response.json()["reviews"][0]["reviewer"]["name"] == "SeedFund"
