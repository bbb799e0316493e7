from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from app.constants.bot_engine import SessionStatus
from app.schemas.bot_session import BotSessionCreate
from app.services.bot_session_service import BotSessionService, is_session_idle


def _create(tenant_id, phone="5511987654321", flow=None):
    return BotSessionCreate(
        tenant_id=tenant_id,
        contact_phone=phone,
        contact_name="Ana",
        flow_id=flow.id if flow else None,
        variables={"phone": phone},
    )


def test_create_session_opens_active_session(db, tenant_id, make_flow):
    """Creating a session opens it as active."""
    flow = make_flow()
    session, created = BotSessionService(db).create_session(_create(tenant_id, flow=flow))

    assert created is True
    assert session.status == SessionStatus.ACTIVE
    assert session.awaiting_input is False
    assert session.variables == {"phone": "5511987654321"}
    assert session.flow_id == flow.id


def test_second_create_reuses_the_active_session(db, tenant_id):
    """The partial unique index rejects a second active session for the contact."""
    service = BotSessionService(db)
    first, _ = service.create_session(_create(tenant_id))

    second, created = service.create_session(_create(tenant_id))

    assert created is False
    assert second.id == first.id


def test_active_sessions_are_per_contact_and_tenant(db, tenant_id):
    """One active session per contact within a tenant."""
    service = BotSessionService(db)
    a, _ = service.create_session(_create(tenant_id, "5511900000001"))
    b, created_b = service.create_session(_create(tenant_id, "5511900000002"))
    c, created_c = service.create_session(_create(uuid4(), "5511900000001"))

    assert created_b and created_c
    assert len({a.id, b.id, c.id}) == 3
    assert service.get_active_session(tenant_id, "5511900000001").id == a.id


def test_ended_session_allows_a_new_one(db, tenant_id):
    """After a session ends the contact can open another."""
    service = BotSessionService(db)
    first, _ = service.create_session(_create(tenant_id))

    ended = service.end_session(first.id)
    second, created = service.create_session(_create(tenant_id))

    assert ended.status == SessionStatus.COMPLETED
    assert ended.ended_at is not None
    assert created is True
    assert second.id != first.id


def test_pause_and_resume(db, tenant_id):
    """A session can be paused and resumed."""
    service = BotSessionService(db)
    session, _ = service.create_session(_create(tenant_id))

    paused = service.pause_session(session.id)
    assert paused.status == SessionStatus.PAUSED
    assert service.get_active_session(tenant_id, session.contact_phone) is None

    with pytest.raises(ValueError, match="Cannot pause"):
        service.pause_session(session.id)

    resumed = service.resume_session(session.id)
    assert resumed.status == SessionStatus.ACTIVE

    with pytest.raises(ValueError, match="Cannot resume"):
        service.resume_session(session.id)


def test_resume_conflicts_with_newer_active_session(db, tenant_id):
    """Resuming fails when the contact has a newer active session."""
    service = BotSessionService(db)
    old, _ = service.create_session(_create(tenant_id))
    service.pause_session(old.id)
    service.create_session(_create(tenant_id))

    with pytest.raises(ValueError, match="already has active session"):
        service.resume_session(old.id)


def test_lifecycle_on_missing_session(db):
    """Lifecycle calls on an unknown session return None."""
    service = BotSessionService(db)
    missing = uuid4()

    assert service.get_session(missing) is None
    assert service.end_session(missing) is None
    assert service.pause_session(missing) is None
    assert service.resume_session(missing) is None
    assert service.update_variables(missing, {}) is None


def test_update_variables_replaces_bag(db, tenant_id):
    """Updating variables replaces the whole bag."""
    service = BotSessionService(db)
    session, _ = service.create_session(_create(tenant_id))

    updated = service.update_variables(session.id, {"plano": "anual"})

    assert updated.variables == {"plano": "anual"}


def test_is_session_idle(make_session):
    """A session is idle once its last activity is past expiry."""
    now = datetime.now(timezone.utc)
    session = make_session(last_activity_at=now - timedelta(minutes=30))

    assert is_session_idle(session, 10, now=now) is True
    assert is_session_idle(session, 60, now=now) is False
    assert is_session_idle(session, 0, now=now) is False
    assert is_session_idle(session, None, now=now) is False


def test_expire_idle_sessions(db, tenant_id, make_session):
    """Idle sessions are expired in bulk."""
    old = datetime.now(timezone.utc) - timedelta(hours=2)
    stale = make_session(contact_phone="5511900000001", last_activity_at=old)
    fresh = make_session(contact_phone="5511900000002")
    other_tenant = make_session(tenant_id=uuid4(), contact_phone="5511900000003", last_activity_at=old)

    expired = BotSessionService(db).expire_idle_sessions(tenant_id, 60)

    assert expired == 1
    for session in (stale, fresh, other_tenant):
        db.refresh(session)
    assert stale.status == SessionStatus.EXPIRED
    assert stale.ended_at is not None
    assert fresh.status == SessionStatus.ACTIVE
    assert other_tenant.status == SessionStatus.ACTIVE
    assert BotSessionService(db).expire_idle_sessions(tenant_id, 0) == 0


def test_sessions_query_filters(db, tenant_id, make_session):
    """The sessions query applies status and search filters."""
    make_session(contact_phone="5511900000001", contact_name="Ana")
    make_session(contact_phone="5511900000002", contact_name="Bruno", status=SessionStatus.COMPLETED.value)

    service = BotSessionService(db)
    assert service.get_sessions_query(tenant_id=tenant_id).count() == 2
    assert service.get_sessions_query(tenant_id=tenant_id, status="active").count() == 1
    assert service.get_sessions_query(tenant_id=tenant_id, search="brun").one().contact_name == "Bruno"
