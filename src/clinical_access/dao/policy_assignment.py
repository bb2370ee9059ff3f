# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.models.policy import PolicyAssignment
from clinical_access.utils.logger import logger


class PolicyAssignmentDAO:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self, principal_reference: str, resource_references: Optional[List[str]]) -> List[PolicyAssignment]:
        logger.info(
            f"PolicyAssignmentDAO - getting assignments for user={principal_reference} scoped in={resource_references}"
        )

        if not resource_references:
            logger.info("PolicyAssignmentDAO - no resource references provided")
            return []

        stmt = select(PolicyAssignment).where(
            PolicyAssignment.principal_reference == principal_reference,
            PolicyAssignment.resource_scope_reference.in_(resource_references),
            PolicyAssignment.is_deleted.is_(False),
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
