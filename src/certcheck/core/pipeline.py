"""Document ingestion and validation pipeline for certcheck."""

from dataclasses import dataclass
from pathlib import Path

from ..export.report import ValidationSummary
from ..extraction.parser import CertificateParser
from ..models.requirements import RuleSet
from ..storage.audit import AuditAction, AuditEntity, log_audit_event
from ..storage.db import CertCheckDB, StoredDocument
from ..utils.logging import get_logger
from ..validation.evaluator import RuleSetEvaluator, create_evaluator
from ..validation.fields import lookup_value, with_value
from ..validation.results import ValidationResult
from .config import Config

logger = get_logger("core.pipeline")


@dataclass
class ValidationRun:
    """Outcome of validating one document against one requirement set."""

    document_id: str
    rule_set: RuleSet
    results: dict[str, ValidationResult]

    @property
    def summary(self) -> ValidationSummary:
        return ValidationSummary.from_results(self.results)


class Pipeline:
    """
    Orchestrates extraction, storage and requirement validation.

    The caller's identity is passed to every call; the pipeline holds none.
    """

    def __init__(
        self,
        db: CertCheckDB,
        config: Config | None = None,
        use_mock_llm: bool = False,
        evaluator: RuleSetEvaluator | None = None,
    ):
        self.config = config or Config.load()
        self.db = db
        self.parser = CertificateParser(config=self.config, use_mock_llm=use_mock_llm)
        self.evaluator = evaluator or create_evaluator()

    def ingest(self, document_path: str | Path, owner_id: str) -> StoredDocument:
        """
        Extracts a certificate and stores it for the given owner.

        Args:
            document_path: Path to the certificate PDF.
            owner_id: Identity of the uploading user.

        Returns:
            The stored document with its extracted record.
        """
        document_path = Path(document_path)
        extraction = self.parser.parse(document_path)

        document = self.db.save_document(owner_id, document_path.name, extraction.record)
        logger.info("Stored %s as document %s", document.file_name, document.id)

        log_audit_event(
            self.db,
            owner_id,
            AuditAction.CREATE,
            AuditEntity.DOCUMENT,
            document.id,
            {
                "file_name": document.file_name,
                "named_insured": document.named_insured,
                "model_used": extraction.model_used,
            },
        )
        return document

    def validate(self, document_id: str, rule_set_ref: str, owner_id: str) -> ValidationRun:
        """
        Validates a stored document against a requirement set.

        Args:
            document_id: Id of a stored document.
            rule_set_ref: Id or name of a requirement set.
            owner_id: Identity of the requesting user.

        Returns:
            The requirement set used and the per-field results.
        """
        document = self.db.get_document(owner_id, document_id)
        rule_set = self.db.find_rule_set(owner_id, rule_set_ref)

        results = self.evaluator.evaluate(document.record, rule_set)
        run = ValidationRun(document_id=document.id, rule_set=rule_set, results=results)
        summary = run.summary
        logger.info(
            "Validated document %s against %r: %d pass, %d fail, %d missing",
            document.id,
            rule_set.name,
            summary.passed,
            summary.failed,
            summary.missing,
        )

        log_audit_event(
            self.db,
            owner_id,
            AuditAction.VALIDATE,
            AuditEntity.DOCUMENT,
            document.id,
            {"requirement_set_id": rule_set.id, **summary.to_dict()},
        )
        return run

    def update_field(
        self, document_id: str, field_key: str, value: str | None, owner_id: str
    ) -> StoredDocument:
        """
        Corrects one extracted value of a stored document.

        An empty value clears the field.

        Raises:
            UnknownFieldError: If the field key is not registered.
            NotFoundError: If the owner has no such document.
        """
        document = self.db.get_document(owner_id, document_id)
        previous = lookup_value(document.record, field_key)
        value = value or None

        record = with_value(document.record, field_key, value)
        updated = self.db.update_document_record(owner_id, document.id, record)
        logger.info("Updated %s on document %s", field_key, document.id)

        log_audit_event(
            self.db,
            owner_id,
            AuditAction.UPDATE,
            AuditEntity.DOCUMENT,
            document.id,
            {"field": field_key, "old_value": previous, "new_value": value},
        )
        return updated

    def delete_document(self, document_id: str, owner_id: str) -> StoredDocument:
        """
        Deletes a stored document and its extracted values.

        Returns:
            The document as it was before deletion.
        """
        document = self.db.get_document(owner_id, document_id)
        self.db.delete_document(owner_id, document.id)
        logger.info("Deleted document %s (%s)", document.id, document.file_name)

        log_audit_event(
            self.db,
            owner_id,
            AuditAction.DELETE,
            AuditEntity.DOCUMENT,
            document.id,
            {"file_name": document.file_name, "named_insured": document.named_insured},
        )
        return document
