# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ReferenceKind(StrEnum):
    USER_PROFILE = "UserProfile"
    RESEARCH_SUBJECT = "ResearchSubject"
    POLICY = "Policy"
    STUDY = "Study"
    STUDY_SITE = "StudySite"

    @property
    def prefix(self) -> str:
        return f"{self.value}/"


class Reference(BaseModel):
    """
    A `<Kind>/<id>` reference split into its parts.
    Kinds outside ReferenceKind are kept as plain strings.
    """

    kind: str
    id: str

    model_config = ConfigDict(frozen=True)

    @field_validator("kind", "id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError(f"invalid reference part: {value!r}")
        return value

    @classmethod
    def parse(cls, value: str, default_kind: Optional[str] = None) -> "Reference":
        """
        Parses `Kind/id`. A bare id is accepted only when `default_kind` is given.
        """
        kind, separator, resource_id = value.partition("/")
        if separator:
            return cls(kind=kind, id=resource_id)
        if default_kind is None:
            raise ValueError(f"reference {value!r} has no resource type and no default was given")
        return cls(kind=str(default_kind), id=value)

    def is_kind(self, kind: str) -> bool:
        return self.kind == str(kind)

    def __str__(self) -> str:
        return f"{self.kind}/{self.id}"
