from datetime import datetime, timedelta, timezone
from uuid import uuid4

from app.constants.bot_engine import MessageDirection
from app.schemas.bot_session import MessageLogCreate
from app.services.message_log_service import MessageLogService


def test_list_and_get_sessions(client, tenant_id, make_session):
    """Sessions can be listed and fetched."""
    session = make_session(contact_name="Ana")
    make_session(tenant_id=uuid4())

    listed = client.get("/sessions", params={"tenant_id": str(tenant_id)}).json()
    assert listed["total"] == 1
    assert listed["items"][0]["id"] == str(session.id)

    response = client.get(f"/sessions/{session.id}")
    assert response.status_code == 200
    assert response.json()["contact_name"] == "Ana"
    assert response.json()["status"] == "active"

    assert client.get(f"/sessions/{uuid4()}").status_code == 404


def test_filter_by_status(client, tenant_id, make_session):
    """Sessions can be filtered by status."""
    make_session()
    make_session(status="completed")

    listed = client.get("/sessions", params={"tenant_id": str(tenant_id), "status": "completed"}).json()

    assert listed["total"] == 1
    assert client.get("/sessions", params={"status": "bogus"}).status_code == 422


def test_session_messages(client, db, tenant_id, make_session):
    """A session's message log is listed in order."""
    session = make_session()
    MessageLogService(db).append(
        MessageLogCreate(
            tenant_id=tenant_id,
            session_id=session.id,
            direction=MessageDirection.INBOUND,
            message_content="oi",
            metadata={"source": "whatsapp"},
        )
    )

    page = client.get(f"/sessions/{session.id}/messages").json()

    assert page["total"] == 1
    assert page["items"][0]["message_content"] == "oi"
    assert page["items"][0]["metadata"] == {"source": "whatsapp"}


def test_lifecycle_transitions(client, make_session):
    """Sessions can be paused, resumed and ended."""
    session = make_session()
    url = f"/sessions/{session.id}"

    assert client.post(f"{url}/pause").json()["status"] == "paused"
    assert client.post(f"{url}/pause").status_code == 409
    assert client.post(f"{url}/resume").json()["status"] == "active"

    ended = client.post(f"{url}/end").json()
    assert ended["status"] == "completed"
    assert ended["ended_at"] is not None
    assert client.post(f"{url}/resume").status_code == 409


def test_replace_variables(client, make_session):
    """The variables endpoint replaces the bag."""
    session = make_session()

    response = client.put(f"/sessions/{session.id}/variables", json={"variables": {"plano": "anual"}})

    assert response.status_code == 200
    assert response.json()["variables"] == {"plano": "anual"}


def test_expire_idle_sessions(client, tenant_id, make_session):
    """Idle sessions are expired in bulk."""
    make_session(last_activity_at=datetime.now(timezone.utc) - timedelta(hours=2))

    response = client.post("/sessions/expire", params={"tenant_id": str(tenant_id), "expire_minutes": 30})

    assert response.status_code == 200
    assert response.json() == {"tenant_id": str(tenant_id), "expired": 1}
