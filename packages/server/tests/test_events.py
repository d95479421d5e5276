"""
Audit event payloads: one closed variant per event kind.
"""

import json
import uuid

import pytest
from pydantic import ValidationError
from structlog.testing import capture_logs

from taskgrid.core.logging import configure_logging
from taskgrid.services.audit import record_event
from taskgrid_shared.schemas.common import EntityKind, Role
from taskgrid_shared.schemas.events import (
    MemberAdded,
    MemberRoleChanged,
    OwnershipTransferred,
    audit_event_adapter,
)


def test_adapter_picks_variant_by_type():
    payload = {
        "type": "member.role_changed",
        "actor_id": str(uuid.uuid4()),
        "level": "workspace",
        "entity_id": str(uuid.uuid4()),
        "user_id": str(uuid.uuid4()),
        "previous_role": "member",
        "new_role": "manager",
    }
    event = audit_event_adapter.validate_python(payload)

    assert isinstance(event, MemberRoleChanged)
    assert event.level is EntityKind.WORKSPACE
    assert event.new_role is Role.MANAGER


def test_unknown_type_rejected():
    with pytest.raises(ValidationError):
        audit_event_adapter.validate_python({"type": "member.promoted"})


def test_variants_are_closed():
    with pytest.raises(ValidationError):
        OwnershipTransferred(
            organization_id=uuid.uuid4(),
            previous_owner_id=uuid.uuid4(),
            new_owner_id=uuid.uuid4(),
            reason="vacation",
        )


def test_record_event_logs_payload():
    org, old, new = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    event = OwnershipTransferred(
        actor_id=old, organization_id=org, previous_owner_id=old, new_owner_id=new
    )

    with capture_logs() as logs:
        assert record_event(event) is event

    assert len(logs) == 1
    assert logs[0]["event"] == "organization.ownership_transferred"
    assert logs[0]["audit"]["new_owner_id"] == str(new)
    assert logs[0]["log_level"] == "info"


def test_membership_level_survives_configured_logging(capsys, reset_logging):
    configure_logging("info", "json")
    event = MemberAdded(
        actor_id=uuid.uuid4(),
        level=EntityKind.WORKSPACE,
        entity_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        role=Role.VIEWER,
    )

    record_event(event)

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["event"] == "member.added"
    assert record["level"] == "info"
    assert record["audit"]["level"] == "workspace"
    assert record["audit"]["role"] == "viewer"
    assert audit_event_adapter.validate_python(record["audit"]) == event
