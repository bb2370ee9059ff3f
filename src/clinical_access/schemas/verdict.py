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
Authorization Verdicts
Transient results of batch authorization. Built fresh for every call and never cached.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from clinical_access.models.connection import Connection
from clinical_access.services.grants import Grant


class AuthorizationVerdict(BaseModel):
    """
    Result of a batch (multi-owner) authorization.

    When `full_auth_granted` is False the caller must only allow references covered by
    `authorized_requestees` plus the references reachable through `authorized_connections`.
    """

    full_auth_granted: bool = True
    authorized_connections: List[Connection] = Field(default_factory=list)
    authorized_requestees: List[str] = Field(default_factory=list)
    # resolved UserProfile reference -> original requested references that map to it
    subject_to_profile_map: Dict[str, List[str]] = Field(default_factory=dict)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def connected_references(self) -> List[str]:
        covered: List[str] = []
        for connection in self.authorized_connections:
            profile_reference = connection.from_reference
            covered.append(profile_reference)
            covered.extend(self.subject_to_profile_map.get(profile_reference, []))
        return covered

    def grant(self) -> Grant:
        if self.full_auth_granted:
            return Grant.full()
        return Grant.partial(self.authorized_requestees) | Grant.partial(self.connected_references())


class PolicyAuthorizationVerdict(BaseModel):
    """
    Result of a resource scoped (study/site) authorization.
    Full, partial or no access is decided by comparing `authorized_resource_scopes`
    with the requested scope.
    """

    full_auth_granted: bool = True
    authorized_resource_scopes: List[str] = Field(default_factory=list)

    def grant(self) -> Grant:
        if self.full_auth_granted:
            return Grant.full()
        return Grant.partial(self.authorized_resource_scopes)
