# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.models.connection import Connection
from clinical_access.models.organization import OrganizationLevelDefaults
from clinical_access.models.profile import ResearchSubject, UserProfile


def _profile(profile_id: str, profile_type: str, **kwargs) -> UserProfile:
    return UserProfile(id=profile_id, type=profile_type, family_name=profile_id.title(), given_names=[], **kwargs)


def _connection(connection_id: str, from_id: str, to_id: str, connection_type: str) -> Connection:
    return Connection(
        id=connection_id,
        from_reference=f"UserProfile/{from_id}",
        to_reference=f"UserProfile/{to_id}",
        type=connection_type,
        status=Connection.STATUS_ACTIVE,
    )


@pytest_asyncio.fixture
async def access_data(async_session: AsyncSession) -> AsyncSession:
    """
    Profiles, enrollments, connections and organization defaults shared by the authorization tests.

    patient-1 shares with prac-1 (partner) and friend shares with patient-1 (friend).
    """
    async_session.add_all(
        [
            _profile("sys", UserProfile.TYPE_SYSTEM),
            _profile("patient-1", UserProfile.TYPE_PATIENT),
            _profile("prac-1", UserProfile.TYPE_PRACTITIONER),
            _profile("cp-1", UserProfile.TYPE_CAREPARTNER),
            _profile("friend", UserProfile.TYPE_PATIENT),
            _profile("stranger", UserProfile.TYPE_PATIENT),
            _profile("gone", UserProfile.TYPE_PATIENT, status=UserProfile.STATUS_INACTIVE),
            ResearchSubject(
                id="rs1", status="on-study", individual_reference="UserProfile/patient-1", study_reference="Study/1"
            ),
            ResearchSubject(
                id="rs-withdrawn",
                status="withdrawn",
                individual_reference="UserProfile/patient-1",
                study_reference="Study/1",
            ),
            ResearchSubject(
                id="rs-friend", status="on-study", individual_reference="UserProfile/friend", study_reference="Study/1"
            ),
            ResearchSubject(
                id="rs-stranger",
                status="on-study",
                individual_reference="UserProfile/stranger",
                study_reference="Study/1",
            ),
            _connection("c-partner", "patient-1", "prac-1", Connection.TYPE_PARTNER),
            _connection("c-friend", "friend", "patient-1", Connection.TYPE_FRIEND),
            OrganizationLevelDefaults(
                id="o1", resource_type="Announcement", access_type=OrganizationLevelDefaults.PUBLIC_READ_WRITE
            ),
            OrganizationLevelDefaults(
                id="o2", resource_type="Article", access_type=OrganizationLevelDefaults.PUBLIC_READ_ONLY
            ),
            OrganizationLevelDefaults(id="o3", resource_type="Observation", access_type=OrganizationLevelDefaults.PRIVATE),
        ]
    )
    await async_session.commit()
    return async_session
