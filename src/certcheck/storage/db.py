"""SQLite storage for requirement sets, documents and the audit log.

Every query is scoped by the owner id the caller passes in.
"""

import json
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from certcheck.core.exceptions import NotFoundError
from certcheck.models.certificate import CertificateRecord
from certcheck.models.requirements import Rule, RuleSet


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS requirement_sets (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    rules TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    file_name TEXT NOT NULL,
    named_insured TEXT,
    extracted TEXT NOT NULL,
    uploaded_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    action_type TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id TEXT,
    details TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_requirement_sets_owner ON requirement_sets(owner_id);
CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents(owner_id);
CREATE INDEX IF NOT EXISTS idx_audit_logs_owner ON audit_logs(owner_id, created_at);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class StoredDocument:
    """A certificate document and the values extracted from it."""

    id: str
    owner_id: str
    file_name: str
    record: CertificateRecord
    uploaded_at: str

    @property
    def named_insured(self) -> str | None:
        return self.record.named_insured


@dataclass
class AuditEvent:
    """One audit log row."""

    id: int
    owner_id: str
    action_type: str
    entity_type: str
    entity_id: str | None
    details: dict[str, Any] | None
    created_at: str


class CertCheckDB:
    """SQLite storage for certcheck data."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SCHEMA_SQL)

    def close(self):
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # --- Requirement sets ---

    def save_rule_set(self, owner_id: str, rule_set: RuleSet) -> None:
        self.conn.execute(
            """INSERT INTO requirement_sets (id, owner_id, name, description, rules, created_at)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                 name=excluded.name,
                 description=excluded.description,
                 rules=excluded.rules
               WHERE requirement_sets.owner_id = excluded.owner_id""",
            (
                rule_set.id,
                owner_id,
                rule_set.name,
                rule_set.description,
                json.dumps([rule.model_dump(mode="json") for rule in rule_set.rules]),
                rule_set.created_at.isoformat(),
            ),
        )
        self.conn.commit()

    def get_rule_set(self, owner_id: str, rule_set_id: str) -> RuleSet:
        row = self.conn.execute(
            "SELECT * FROM requirement_sets WHERE owner_id = ? AND id = ?",
            (owner_id, rule_set_id),
        ).fetchone()
        if row is None:
            raise NotFoundError("Requirement set", rule_set_id)
        return self._row_to_rule_set(row)

    def find_rule_set(self, owner_id: str, ref: str) -> RuleSet:
        """Look up a requirement set by id, or by name when no id matches."""
        row = self.conn.execute(
            """SELECT * FROM requirement_sets
               WHERE owner_id = ? AND (id = ? OR name = ?)
               ORDER BY id = ? DESC, created_at DESC
               LIMIT 1""",
            (owner_id, ref, ref, ref),
        ).fetchone()
        if row is None:
            raise NotFoundError("Requirement set", ref)
        return self._row_to_rule_set(row)

    def list_rule_sets(self, owner_id: str) -> list[RuleSet]:
        rows = self.conn.execute(
            "SELECT * FROM requirement_sets WHERE owner_id = ? ORDER BY created_at DESC",
            (owner_id,),
        ).fetchall()
        return [self._row_to_rule_set(row) for row in rows]

    def delete_rule_set(self, owner_id: str, rule_set_id: str) -> None:
        cursor = self.conn.execute(
            "DELETE FROM requirement_sets WHERE owner_id = ? AND id = ?",
            (owner_id, rule_set_id),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Requirement set", rule_set_id)

    def _row_to_rule_set(self, row: sqlite3.Row) -> RuleSet:
        return RuleSet(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            rules=[Rule.model_validate(r) for r in json.loads(row["rules"])],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # --- Documents ---

    def save_document(
        self,
        owner_id: str,
        file_name: str,
        record: CertificateRecord,
        document_id: str | None = None,
    ) -> StoredDocument:
        document = StoredDocument(
            id=document_id or str(uuid.uuid4()),
            owner_id=owner_id,
            file_name=file_name,
            record=record,
            uploaded_at=_now(),
        )
        self.conn.execute(
            """INSERT INTO documents (id, owner_id, file_name, named_insured, extracted, uploaded_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                document.id,
                owner_id,
                file_name,
                record.named_insured,
                json.dumps(record.to_payload()),
                document.uploaded_at,
            ),
        )
        self.conn.commit()
        return document

    def update_document_record(
        self, owner_id: str, document_id: str, record: CertificateRecord
    ) -> StoredDocument:
        """Replace the extracted values of a document, e.g. after manual edits."""
        cursor = self.conn.execute(
            """UPDATE documents SET named_insured = ?, extracted = ?
               WHERE owner_id = ? AND id = ?""",
            (record.named_insured, json.dumps(record.to_payload()), owner_id, document_id),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Document", document_id)
        return self.get_document(owner_id, document_id)

    def get_document(self, owner_id: str, document_id: str) -> StoredDocument:
        row = self.conn.execute(
            "SELECT * FROM documents WHERE owner_id = ? AND id = ?",
            (owner_id, document_id),
        ).fetchone()
        if row is None:
            raise NotFoundError("Document", document_id)
        return self._row_to_document(row)

    def list_documents(self, owner_id: str) -> list[StoredDocument]:
        rows = self.conn.execute(
            "SELECT * FROM documents WHERE owner_id = ? ORDER BY uploaded_at DESC",
            (owner_id,),
        ).fetchall()
        return [self._row_to_document(row) for row in rows]

    def delete_document(self, owner_id: str, document_id: str) -> None:
        cursor = self.conn.execute(
            "DELETE FROM documents WHERE owner_id = ? AND id = ?",
            (owner_id, document_id),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Document", document_id)

    def _row_to_document(self, row: sqlite3.Row) -> StoredDocument:
        return StoredDocument(
            id=row["id"],
            owner_id=row["owner_id"],
            file_name=row["file_name"],
            record=CertificateRecord.from_payload(json.loads(row["extracted"])),
            uploaded_at=row["uploaded_at"],
        )

    # --- Audit log ---

    def add_audit_event(
        self,
        owner_id: str,
        action_type: str,
        entity_type: str,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.conn.execute(
            """INSERT INTO audit_logs (owner_id, action_type, entity_type, entity_id, details, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                owner_id,
                action_type,
                entity_type,
                entity_id,
                json.dumps(details) if details is not None else None,
                _now(),
            ),
        )
        self.conn.commit()

    def list_audit_events(
        self,
        owner_id: str,
        limit: int = 50,
        entity_type: Optional[str] = None,
    ) -> list[AuditEvent]:
        query = "SELECT * FROM audit_logs WHERE owner_id = ?"
        params: list[Any] = [owner_id]
        if entity_type:
            query += " AND entity_type = ?"
            params.append(entity_type)
        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        rows = self.conn.execute(query, params).fetchall()
        return [
            AuditEvent(
                id=row["id"],
                owner_id=row["owner_id"],
                action_type=row["action_type"],
                entity_type=row["entity_type"],
                entity_id=row["entity_id"],
                details=json.loads(row["details"]) if row["details"] else None,
                created_at=row["created_at"],
            )
            for row in rows
        ]
