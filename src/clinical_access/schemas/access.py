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
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from clinical_access.models.policy import Policy


class AccessType(StrEnum):
    READ = "read"
    EDIT = "edit"


class ResearchSubjectCriteria(BaseModel):
    """
    Extra conditions applied when ResearchSubject rows are looked up.
    """

    excluded_statuses: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class AuthorizationRequest(BaseModel):
    """
    Single-owner authorization request.
    References are `UserProfile/<id>` or `ResearchSubject/<id>`; `requester` is a bare profile id.
    """

    requester: str
    owner_reference: Optional[str] = Field(None, alias="ownerReference")
    information_source_reference: Optional[str] = Field(None, alias="informationSourceReference")
    resource_type: str = Field(alias="resourceType")
    access_type: str = Field(alias="accessType")
    resource_actions: Optional[List[str]] = Field(None, alias="resourceActions")
    owner_type: Optional[str] = Field(None, alias="ownerType")

    model_config = ConfigDict(populate_by_name=True)


class ResourceAccessRequest(BaseModel):
    requester_reference: str
    scoped_resources: List[str] = Field(default_factory=list)
    resource_actions: Optional[List[str]] = None
    # echoed back in the response to identify what the request was about
    request_token: Optional[str] = None


class ResourceAccessResponse(BaseModel):
    granted_policies: List[Policy] = Field(default_factory=list)
    granted_resources: List[str] = Field(default_factory=list)
    request_token: Optional[str] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)


class SubjectAccessRequest(BaseModel):
    requester_reference: str
    subject_references: List[str] = Field(default_factory=list)
    resource_actions: Optional[List[str]] = None
