# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.models.connection import Connection
from clinical_access.services.references import to_user_profile_reference
from clinical_access.utils.logger import logger


class ConnectionStore:
    """
    Lookup of active, directed connections between profiles.
    `from_profile` shares its data with `to_profile`; the direction is never reversed here.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def has_connection(
        self, from_profile: str, to_profile: str, types: List[str], statuses: List[str]
    ) -> List[Connection]:
        """
        Connections from `from_profile` to `to_profile`. Both accept an id or a UserProfile reference.
        An empty list means no connection.
        """
        logger.info("Inside ConnectionStore :: has_connection()")
        stmt = select(Connection).where(
            Connection.from_reference == to_user_profile_reference(from_profile),
            Connection.to_reference == to_user_profile_reference(to_profile),
            Connection.type.in_(types),
            Connection.status.in_(statuses),
            Connection.is_deleted.is_(False),
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_connections(
        self, from_profiles: List[str], to_profile: str, types: List[str], statuses: List[str]
    ) -> List[Connection]:
        """
        Connections from any of `from_profiles` to `to_profile`.
        """
        logger.info("Entering ConnectionStore :: get_connections()")
        if not from_profiles:
            return []

        stmt = select(Connection).where(
            Connection.from_reference.in_([to_user_profile_reference(profile) for profile in from_profiles]),
            Connection.to_reference == to_user_profile_reference(to_profile),
            Connection.type.in_(types),
            Connection.status.in_(statuses),
            Connection.is_deleted.is_(False),
        )
        result = await self.db.execute(stmt)
        logger.info("Exiting ConnectionStore :: get_connections()")
        return list(result.scalars().all())
