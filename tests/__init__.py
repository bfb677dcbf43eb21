# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the InnovateHub API:
# - test_models.py: Pydantic model and form validation
# - test_services.py: Service layer with SupabaseClient mocked
# - test_routers.py: Endpoint tests through TestClient
# - test_auth.py: JWT verification and role gating
# - test_similarity.py / test_ledger.py: AI scoring and ledger client
# - test_messages.py: Chat ids, merge ordering and the event stream
# - test_metrics.py / test_workers.py: Dashboards and Celery tasks
#
# Run tests with: pytest
# =============================================================================
