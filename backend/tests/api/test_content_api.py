"""Integration tests for the content, credits and demo endpoints.

Tests cover:
- POST /api/content/generate success, rejections and the debit-failed warning
- GET /api/content/history ordering and user isolation
- DELETE /api/content/{id} ownership (404 for foreign and missing ids)
- GET /api/user/credits
- POST /api/demo/generate
- Error body shape ({"detail": {...}, "debug_id"})
"""

from uuid import uuid4

import pytest

from content_studio.core.auth import ClerkUser
from content_studio.core.config import Settings
from content_studio.core.exceptions import StoreError
from content_studio.providers.fake import FakeProvider
from content_studio.stores.base import DebitResult

pytestmark = pytest.mark.integration


def _payload(**overrides) -> dict:
    body = {
        "contentType": "blog-post",
        "topic": "Remote work productivity",
        "tone": "professional",
        "length": "medium",
    }
    body.update(overrides)
    return body


def _credits(client) -> int:
    response = client.get("/api/user/credits")
    assert response.status_code == 200
    return response.json()["credits"]


class _FailingDebitStore:
    """Delegates reads to the real store; every debit raises."""

    def __init__(self, inner):
        self.inner = inner

    async def read(self, account_id):
        return await self.inner.read(account_id)

    async def conditional_debit(self, account_id, amount, expected_balance) -> DebitResult:
        raise StoreError("balance_debit", "database is locked")


# =============================================================================
# POST /api/content/generate
# =============================================================================


def test_generate_success(api_client, login, user_a):
    login(user_a)

    response = api_client.post("/api/content/generate", json=_payload())

    assert response.status_code == 200
    data = response.json()
    assert data["cost"] == 2
    assert data["remainingCredits"] == 8
    assert data["content"].startswith("# Draft")
    assert "artifactId" in data
    assert "billingWarning" not in data
    assert "X-Billing-Warning" not in response.headers
    assert _credits(api_client) == 8


def test_generate_accepts_snake_case_fields(api_client, login, user_a):
    login(user_a)

    response = api_client.post(
        "/api/content/generate",
        json={"content_type": "email", "topic": "Launch", "tone": "casual", "length": "short"},
    )

    assert response.status_code == 200
    assert response.json()["cost"] == 1


def test_generate_spends_down_then_insufficient(api_client, login, user_b):
    """Balance 2: medium leaves 0, the following short request is refused with 400."""
    login(user_b)

    first = api_client.post("/api/content/generate", json=_payload(length="medium"))
    assert first.status_code == 200
    assert first.json()["remainingCredits"] == 0

    second = api_client.post("/api/content/generate", json=_payload(length="short"))

    assert second.status_code == 400
    body = second.json()
    assert body["detail"]["code"] == "insufficient_balance"
    assert body["detail"]["required"] == 1
    assert body["detail"]["available"] == 0
    assert "debug_id" in body


def test_generate_missing_fields_is_400(api_client, login, user_a):
    login(user_a)

    response = api_client.post("/api/content/generate", json={"contentType": "email", "topic": " "})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "invalid_request"
    assert detail["fields"] == ["topic", "tone", "length"]
    assert _credits(api_client) == 10


def test_generate_malformed_body_is_400(api_client, login, user_a):
    login(user_a)

    response = api_client.post("/api/content/generate", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_request"


def test_generate_unknown_account_is_404(api_client, login):
    login(ClerkUser(user_id="user_ghost", claims={"sub": "user_ghost"}))

    response = api_client.post("/api/content/generate", json=_payload())

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "unknown_account"


def test_generate_requires_authentication(api_client):
    response = api_client.post("/api/content/generate", json=_payload())

    assert response.status_code == 401


def test_generate_provider_failure_charges_nothing(api_client, login, user_a):
    login(user_a)
    api_client.app.state.generation_service.provider = FakeProvider(scenario="provider_failure")

    response = api_client.post("/api/content/generate", json=_payload())

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "generation_failed"
    assert _credits(api_client) == 10
    assert api_client.get("/api/content/history").json()["count"] == 0


def test_generate_debit_failure_returns_warning(api_client, login, user_a):
    login(user_a)
    service = api_client.app.state.generation_service
    service.balance_store = _FailingDebitStore(service.balance_store)

    response = api_client.post("/api/content/generate", json=_payload())

    assert response.status_code == 200
    assert response.headers["X-Billing-Warning"] == "debit-failed"
    data = response.json()
    assert data["billingWarning"] == "Content generated but credit deduction failed"
    assert data["remainingCredits"] == 10
    assert api_client.get("/api/content/history").json()["count"] == 1


# =============================================================================
# GET /api/content/history, DELETE /api/content/{id}
# =============================================================================


def test_history_newest_first_and_isolated(api_client, login, user_a, user_b):
    login(user_a)
    api_client.post("/api/content/generate", json=_payload(topic="First", length="short"))
    api_client.post("/api/content/generate", json=_payload(topic="Second", length="short"))

    response = api_client.get("/api/content/history")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert [item["topic"] for item in data["content"]] == ["Second", "First"]
    item = data["content"][0]
    assert item["contentType"] == "blog-post"
    assert item["cost"] == 1
    assert item["metadata"]["tone"] == "professional"
    assert "createdAt" in item

    login(user_b)
    assert api_client.get("/api/content/history").json() == {"content": [], "count": 0}


def test_delete_own_content_without_refund(api_client, login, user_a):
    login(user_a)
    artifact_id = api_client.post("/api/content/generate", json=_payload()).json()["artifactId"]

    response = api_client.delete(f"/api/content/{artifact_id}")

    assert response.status_code == 200
    assert response.json() == {"message": "Content deleted successfully"}
    assert api_client.get("/api/content/history").json()["count"] == 0
    assert _credits(api_client) == 8

    again = api_client.delete(f"/api/content/{artifact_id}")
    assert again.status_code == 404


def test_delete_foreign_content_is_404(api_client, login, user_a, user_b):
    login(user_a)
    artifact_id = api_client.post("/api/content/generate", json=_payload()).json()["artifactId"]

    login(user_b)
    foreign = api_client.delete(f"/api/content/{artifact_id}")
    missing = api_client.delete(f"/api/content/{uuid4()}")

    assert foreign.status_code == 404
    assert foreign.json()["detail"] == missing.json()["detail"]
    assert foreign.json()["detail"]["code"] == "not_found_or_unauthorized"

    login(user_a)
    assert api_client.get("/api/content/history").json()["count"] == 1


def test_delete_malformed_id_is_404(api_client, login, user_a):
    login(user_a)

    assert api_client.delete("/api/content/not-a-uuid").status_code == 404


# =============================================================================
# GET /api/user/credits
# =============================================================================


def test_credits(api_client, login, user_b):
    login(user_b)

    assert api_client.get("/api/user/credits").json() == {"credits": 2}


def test_credits_unknown_account(api_client, login):
    login(ClerkUser(user_id="user_ghost", claims={"sub": "user_ghost"}))

    response = api_client.get("/api/user/credits")

    assert response.status_code == 404


# =============================================================================
# POST /api/demo/generate
# =============================================================================


def test_demo_generate_needs_no_auth(api_client):
    response = api_client.post(
        "/api/demo/generate",
        json={"contentType": "social-media", "topic": "Coffee", "tone": "humorous"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["content"].startswith("# Draft")
    assert data["message"] == "Demo content generated successfully (fake)"


def test_demo_missing_fields(api_client):
    response = api_client.post("/api/demo/generate", json={"topic": "Coffee"})

    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["content_type", "tone"]


def test_demo_disabled_is_404(api_client, monkeypatch):
    monkeypatch.setattr(
        "content_studio.api.routes.demo.get_settings",
        lambda: Settings(_env_file=None, demo_enabled=False),
    )

    response = api_client.post(
        "/api/demo/generate",
        json={"contentType": "social-media", "topic": "Coffee", "tone": "humorous"},
    )

    assert response.status_code == 404
