"""Bundled extraction payloads for known sample certificates."""

import copy
from typing import Any

SAMPLE_CERTIFICATES: dict[str, dict[str, Any]] = {
    "Example2.pdf": {
        "named_insured": "General Freight Hauling Ltd.\n9623 25 Ave NW, Edmonton, AB, T6N 1H7",
        "certificate_holder": "EDM Trailer Rentals Ltd.\n9623 25 Ave NW, Edmonton, AB",
        "additional_insured": "Edm Trailer Rentals Ltd.\n9623 25 Ave NW, Edmonton, AB",
        "cancellation_notice_period": "30",
        "form_type": "CSIO C0910ECL - CERTIFICATE OF LIABILITY INSURANCE - 2010/09",
        "coverages": [
            {
                "type": "Commercial General Liability",
                "insurance_company": "Intact Insurance Co.",
                "policy_number": "654321",
                "coverage_limit": "2,000,000",
                "coverage_currency": "CAD",
                "deductible_limit": "0",
                "deductible_currency": "CAD",
                "effective_date": "2025-11-24",
                "expiry_date": "2026-11-24",
            },
            {
                "type": "Automobile Liability",
                "insurance_company": "Intact Insurance Co.",
                "policy_number": "123456",
                "coverage_limit": "2,000,000",
                "coverage_currency": "CAD",
                "deductible_limit": "0",
                "deductible_currency": "CAD",
                "effective_date": "2025-11-24",
                "expiry_date": "2026-11-24",
            },
            {
                "type": "Non-Owned Trailer Liability",
                "insurance_company": "Intact Insurance Co.",
                "policy_number": "123456",
                "coverage_limit": "85,000",
                "coverage_currency": "CAD",
                "deductible_limit": "5,000",
                "deductible_currency": "CAD",
                "effective_date": "2025-11-24",
                "expiry_date": "2026-11-24",
            },
        ],
    },
}


def get_sample_payload(file_name: str) -> dict[str, Any] | None:
    """Get a copy of the bundled payload for a sample file name, if any."""
    payload = SAMPLE_CERTIFICATES.get(file_name)
    return copy.deepcopy(payload) if payload is not None else None
