# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.models.base import utcnow
from clinical_access.models.policy import CareTeam, CareTeamParticipant
from clinical_access.services.references import STUDY_PREFIX, STUDY_SITE_PREFIX, get_unique_references
from clinical_access.utils.logger import logger


def is_expired(period_end: Optional[datetime], now: datetime) -> bool:
    return period_end is not None and period_end < now


class CareTeamDAO:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self, member_reference: str, scoped_references: List[str]) -> List[CareTeam]:
        """
        Active care teams of a study or site in `scoped_references` in which `member_reference`
        is an active participant.

        The team period and the participant period are checked separately: the team must not have ended
        (checked in the query) and the member's own participation must not have ended (checked per row).
        """
        logger.info(f"CareTeamDAO - looking up care teams of {member_reference} for {scoped_references}")
        now = utcnow()
        site_references = get_unique_references(scoped_references, STUDY_SITE_PREFIX)
        study_references = get_unique_references(scoped_references, STUDY_PREFIX)

        if not site_references and not study_references:
            logger.info("CareTeamDAO - no study or site references provided")
            return []

        stmt = select(CareTeam).where(
            CareTeam.status == CareTeam.STATUS_ACTIVE,
            CareTeam.is_deleted.is_(False),
            CareTeam.participants.any(CareTeamParticipant.member_reference == member_reference),
            or_(
                CareTeam.study_reference.in_(study_references),
                CareTeam.site_reference.in_(site_references),
            ),
            or_(CareTeam.period_end.is_(None), CareTeam.period_end >= now),
        )
        result = await self.db.execute(stmt)
        care_teams = list(result.scalars().unique().all())
        logger.info(f"CareTeamDAO - care teams found: {len(care_teams)}")

        filtered_care_teams = [
            care_team
            for care_team in care_teams
            if any(self._is_active_member(participant, member_reference, now) for participant in care_team.participants)
        ]
        logger.info(f"CareTeamDAO - filtered care teams: {len(filtered_care_teams)}")
        return filtered_care_teams

    @staticmethod
    def _is_active_member(participant: CareTeamParticipant, member_reference: str, now: datetime) -> bool:
        return (
            participant.member_reference == member_reference
            and participant.status == CareTeam.STATUS_ACTIVE
            and not is_expired(participant.period_end, now)
        )
