# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.models.organization import OrganizationLevelDefaults


class OrganizationLevelDefaultsDAO:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_access_type(self, resource_type: Optional[str]) -> Optional[str]:
        if not resource_type:
            return None
        stmt = (
            select(OrganizationLevelDefaults.access_type)
            .where(OrganizationLevelDefaults.resource_type == resource_type)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()
