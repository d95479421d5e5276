"""
Audit trail for tenancy mutations.

Events are typed (see ``taskgrid_shared.schemas.events``) and written to the
structured log. Delivery to email or notification channels happens elsewhere.
"""

from __future__ import annotations

import structlog

from taskgrid_shared.schemas.events import AuditEvent

log = structlog.get_logger("taskgrid.audit")


def record_event(event: AuditEvent) -> AuditEvent:
    """Log an audit event and hand it back to the caller.

    The payload is nested under ``audit`` so its fields never collide with
    the keys logging processors add (``level``, ``timestamp``, ``event``).
    """
    log.info(event.type, audit=event.model_dump(mode="json"))
    return event
