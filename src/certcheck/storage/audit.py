"""Audit logging of user actions on documents and requirement sets."""

import sqlite3
from enum import Enum
from typing import Any

from certcheck.storage.db import CertCheckDB
from certcheck.utils.logging import get_logger

logger = get_logger("storage.audit")


class AuditAction(str, Enum):
    """Kind of action recorded in the audit log."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VALIDATE = "validate"


class AuditEntity(str, Enum):
    """Kind of entity an audited action applies to."""

    DOCUMENT = "document"
    REQUIREMENT_SET = "requirement_set"


def log_audit_event(
    db: CertCheckDB,
    owner_id: str,
    action: AuditAction,
    entity_type: AuditEntity,
    entity_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> bool:
    """Record an audit event.

    A failed write is logged and reported through the return value; it never
    interrupts the action being audited.

    Args:
        db: Open database
        owner_id: Identity of the user performing the action
        action: Action performed
        entity_type: Type of entity acted upon
        entity_id: Optional id of the entity
        details: Optional extra context stored as JSON

    Returns:
        True if the event was written
    """
    if not owner_id:
        logger.warning("No user id given, skipping audit log")
        return False

    try:
        db.add_audit_event(
            owner_id,
            AuditAction(action).value,
            AuditEntity(entity_type).value,
            entity_id,
            details,
        )
    except (sqlite3.Error, TypeError, ValueError) as e:
        logger.error("Failed to insert audit log: %s", e)
        return False

    suffix = f" ({entity_id})" if entity_id else ""
    logger.info("Logged %s on %s%s", AuditAction(action).value, AuditEntity(entity_type).value, suffix)
    return True
