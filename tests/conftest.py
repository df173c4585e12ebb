"""Shared fixtures for certcheck tests."""

import pytest

from certcheck.extraction.samples import get_sample_payload
from certcheck.models.certificate import CertificateRecord
from certcheck.storage.db import CertCheckDB


@pytest.fixture
def sample_payload() -> dict:
    """Extraction payload of the bundled Example2 certificate."""
    return get_sample_payload("Example2.pdf")


@pytest.fixture
def sample_record(sample_payload) -> CertificateRecord:
    """Example2 certificate with the additional insured left blank."""
    record = CertificateRecord.from_payload(sample_payload)
    return record.model_copy(update={"additional_insured": ""})


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temporary database."""
    with CertCheckDB(tmp_path / "test.db") as db:
        yield db
