# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.dao.organization import OrganizationLevelDefaultsDAO
from clinical_access.dao.research_subject import ResearchSubjectDAO
from clinical_access.models.organization import OrganizationLevelDefaults
from clinical_access.models.profile import ResearchSubject
from clinical_access.schemas.access import ResearchSubjectCriteria


@pytest_asyncio.fixture
async def subjects(async_session: AsyncSession) -> None:
    async_session.add_all(
        [
            ResearchSubject(
                id="rs1", status="on-study", individual_reference="UserProfile/1", study_reference="Study/1"
            ),
            ResearchSubject(
                id="rs2", status="withdrawn", individual_reference="UserProfile/1", study_reference="Study/1"
            ),
            ResearchSubject(
                id="rs3",
                status="on-study",
                individual_reference="UserProfile/2",
                study_reference="Study/1",
                is_deleted=True,
            ),
        ]
    )
    await async_session.commit()


@pytest.mark.asyncio
async def test_get_by_references(async_session: AsyncSession, subjects: None) -> None:
    dao = ResearchSubjectDAO(async_session)
    found = await dao.get_by_references(["ResearchSubject/rs1", "UserProfile/1", "ResearchSubject/rs3", None])
    assert [subject.id for subject in found] == ["rs1"]
    assert await dao.get_by_references(["UserProfile/1"]) == []


@pytest.mark.asyncio
async def test_find_by_ids_with_criteria_and_individual(async_session: AsyncSession, subjects: None) -> None:
    dao = ResearchSubjectDAO(async_session)
    criteria = ResearchSubjectCriteria(excluded_statuses=ResearchSubject.WITHDRAWN_STATUSES)

    assert {subject.id for subject in await dao.find_by_ids(["rs1", "rs2"])} == {"rs1", "rs2"}
    assert [subject.id for subject in await dao.find_by_ids(["rs1", "rs2"], criteria)] == ["rs1"]
    assert await dao.find_by_ids(["rs1"], individual_reference="UserProfile/2") == []


@pytest.mark.asyncio
async def test_organization_access_type(async_session: AsyncSession) -> None:
    async_session.add(
        OrganizationLevelDefaults(id="1", resource_type="Task", access_type=OrganizationLevelDefaults.PUBLIC_READ_ONLY)
    )
    await async_session.commit()

    dao = OrganizationLevelDefaultsDAO(async_session)
    assert await dao.get_access_type("Task") == "public-read-only"
    assert await dao.get_access_type("Observation") is None
    assert await dao.get_access_type(None) is None
