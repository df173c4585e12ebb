"""Persistence for requirement sets, documents and the audit log."""

from certcheck.storage.audit import AuditAction, AuditEntity, log_audit_event
from certcheck.storage.db import AuditEvent, CertCheckDB, StoredDocument

__all__ = [
    "AuditAction",
    "AuditEntity",
    "AuditEvent",
    "CertCheckDB",
    "StoredDocument",
    "log_audit_event",
]
