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
Reference helpers.
Pure functions converting between bare ids and `Prefix/id` references.
"""

from typing import Iterable, List, Optional

from clinical_access.schemas.reference import Reference, ReferenceKind
from clinical_access.services.exceptions import InvalidRequest

USER_PROFILE_PREFIX = ReferenceKind.USER_PROFILE.prefix
RESEARCH_SUBJECT_PREFIX = ReferenceKind.RESEARCH_SUBJECT.prefix
POLICY_PREFIX = ReferenceKind.POLICY.prefix
STUDY_PREFIX = ReferenceKind.STUDY.prefix
STUDY_SITE_PREFIX = ReferenceKind.STUDY_SITE.prefix


def get_unique_references(references: Optional[Iterable[Optional[str]]], prefix: str) -> List[str]:
    """
    Unique, non-empty references containing `prefix`, in first-seen order.
    """
    return [reference for reference in dict.fromkeys(references or []) if reference and prefix in reference]


def convert_to_resource_reference(id_or_reference: str, prefix: str) -> str:
    # only bare ids get the prefix, references of any kind are returned as is
    if prefix in id_or_reference or "/" in id_or_reference:
        return id_or_reference
    return prefix + id_or_reference


def convert_to_resource_references(ids_or_references: Iterable[str], prefix: str) -> List[str]:
    return [convert_to_resource_reference(value, prefix) for value in ids_or_references]


def convert_to_resource_id(id_or_reference: str, prefix: str) -> str:
    # only the matching prefix is stripped
    if prefix not in id_or_reference:
        return id_or_reference
    return id_or_reference.split(prefix, 1)[1]


def convert_to_resource_ids(ids_or_references: Iterable[str], prefix: str) -> List[str]:
    return [convert_to_resource_id(value, prefix) for value in ids_or_references]


def remove_references(source: List[str], to_remove: Optional[Iterable[str]]) -> List[str]:
    """
    Removes `to_remove` from `source`. When nothing is given to remove, `source` is returned unchanged.
    """
    removals = set(to_remove or [])
    if not removals:
        return source
    return [reference for reference in source if reference not in removals]


def is_reference_of(value: Optional[str], kind: ReferenceKind) -> bool:
    return bool(value and kind.prefix in value)


def to_user_profile_reference(value: str) -> str:
    try:
        return str(Reference.parse(value, default_kind=ReferenceKind.USER_PROFILE))
    except ValueError as e:
        raise InvalidRequest(f"Invalid profile reference: {value!r}") from e
