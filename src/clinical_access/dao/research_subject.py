# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.models.profile import ResearchSubject
from clinical_access.schemas.access import ResearchSubjectCriteria
from clinical_access.services.references import (
    RESEARCH_SUBJECT_PREFIX,
    convert_to_resource_ids,
    get_unique_references,
)
from clinical_access.utils.logger import logger


class ResearchSubjectDAO:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_references(self, references: Iterable[Optional[str]]) -> List[ResearchSubject]:
        """
        Non-deleted ResearchSubjects for the unique ResearchSubject references in `references`.
        Other references are ignored.
        """
        unique_references = get_unique_references(references, RESEARCH_SUBJECT_PREFIX)
        if not unique_references:
            logger.info("ResearchSubjectDAO - no ResearchSubject references provided")
            return []

        return await self.find_by_ids(convert_to_resource_ids(unique_references, RESEARCH_SUBJECT_PREFIX))

    async def find_by_ids(
        self,
        subject_ids: List[str],
        criteria: Optional[ResearchSubjectCriteria] = None,
        individual_reference: Optional[str] = None,
    ) -> List[ResearchSubject]:
        stmt = select(ResearchSubject).where(
            ResearchSubject.id.in_(subject_ids),
            ResearchSubject.is_deleted.is_(False),
        )

        if individual_reference:
            stmt = stmt.where(ResearchSubject.individual_reference == individual_reference)

        if criteria and criteria.excluded_statuses:
            stmt = stmt.where(ResearchSubject.status.not_in(criteria.excluded_statuses))

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
