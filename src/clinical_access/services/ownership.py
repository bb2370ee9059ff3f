# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

"""
Record Ownership
Registry of where the owner and information source references live in each resource type,
and helpers applying a batch verdict to fetched or submitted records.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from clinical_access.schemas.verdict import AuthorizationVerdict
from clinical_access.services.exceptions import AuthorizationDenied
from clinical_access.utils.logger import logger

FieldPath = Tuple[str, ...]

SUBJECT_REFERENCE: FieldPath = ("subject", "reference")
PATIENT_REFERENCE: FieldPath = ("patient", "reference")
CONSENTING_PARTY_REFERENCE: FieldPath = ("consentingParty", "reference")
FROM_REFERENCE: FieldPath = ("from", "reference")
INDIVIDUAL_REFERENCE: FieldPath = ("individual", "reference")
INFORMATION_SOURCE_REFERENCE: FieldPath = ("informationSource", "reference")


class OwnershipPaths(BaseModel):
    owner: FieldPath
    information_source: Optional[FieldPath] = INFORMATION_SOURCE_REFERENCE

    model_config = ConfigDict(frozen=True)


DEFAULT_PATHS = OwnershipPaths(owner=SUBJECT_REFERENCE)

OWNERSHIP_REGISTRY: Dict[str, OwnershipPaths] = {
    "Observation": DEFAULT_PATHS,
    "Condition": DEFAULT_PATHS,
    "Procedure": DEFAULT_PATHS,
    "MedicationStatement": DEFAULT_PATHS,
    "MedicationRequest": DEFAULT_PATHS,
    "Encounter": DEFAULT_PATHS,
    "DiagnosticReport": DEFAULT_PATHS,
    "CarePlan": DEFAULT_PATHS,
    "Goal": DEFAULT_PATHS,
    "AllergyIntolerance": OwnershipPaths(owner=PATIENT_REFERENCE),
    "Immunization": OwnershipPaths(owner=PATIENT_REFERENCE),
    "Consent": OwnershipPaths(owner=CONSENTING_PARTY_REFERENCE),
    "Connection": OwnershipPaths(owner=FROM_REFERENCE, information_source=None),
    "ResearchSubject": OwnershipPaths(owner=INDIVIDUAL_REFERENCE, information_source=None),
}


def get_ownership_paths(resource_type: str) -> OwnershipPaths:
    return OWNERSHIP_REGISTRY.get(resource_type, DEFAULT_PATHS)


def _read_path(record: Mapping[str, Any], path: FieldPath) -> Optional[str]:
    value: Any = record
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value if isinstance(value, str) and value else None


def get_owner_reference(resource_type: str, record: Mapping[str, Any]) -> Optional[str]:
    return _read_path(record, get_ownership_paths(resource_type).owner)


def get_information_source_reference(resource_type: str, record: Mapping[str, Any]) -> Optional[str]:
    path = get_ownership_paths(resource_type).information_source
    if path is None:
        return None
    return _read_path(record, path)


def filter_authorized_records(
    verdict: AuthorizationVerdict, resource_type: str, records: List[Mapping[str, Any]]
) -> List[Mapping[str, Any]]:
    """
    Read path: keeps the records whose owner is covered by the verdict. Uncovered records are dropped silently.
    """
    grant = verdict.grant()
    if grant.is_full:
        return records
    authorized = [record for record in records if grant.permits(get_owner_reference(resource_type, record) or "")]
    logger.info(f"Ownership :: {len(authorized)} of {len(records)} {resource_type} records are authorized")
    return authorized


def ensure_authorized_records(
    verdict: AuthorizationVerdict, resource_type: str, records: List[Mapping[str, Any]]
) -> None:
    """
    Write path: every record's owner must be covered by the verdict.

    Raises:
        AuthorizationDenied: at least one record is not covered.
    """
    grant = verdict.grant()
    if grant.is_full:
        return
    owners = [get_owner_reference(resource_type, record) for record in records]
    if any(owner is None for owner in owners) or not grant.covers(owners):
        logger.error(f"Ownership :: not all {resource_type} records are owned by authorized profiles")
        raise AuthorizationDenied()
