# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from clinical_access.models.base import Base
from clinical_access.models.connection import Connection
from clinical_access.models.organization import OrganizationLevelDefaults
from clinical_access.models.policy import CareTeam, CareTeamParticipant, Policy, PolicyAction, PolicyAssignment
from clinical_access.models.profile import ResearchSubject, UserProfile

__all__ = [
    "Base",
    "UserProfile",
    "ResearchSubject",
    "Connection",
    "Policy",
    "PolicyAction",
    "PolicyAssignment",
    "CareTeam",
    "CareTeamParticipant",
    "OrganizationLevelDefaults",
]
