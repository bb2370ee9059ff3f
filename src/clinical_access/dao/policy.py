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

from clinical_access.models.policy import Policy, PolicyAction
from clinical_access.services.references import POLICY_PREFIX, convert_to_resource_ids
from clinical_access.utils.logger import logger


class PolicyDAO:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self, policy_references: Optional[List[str]], actions: List[str]) -> List[Policy]:
        """
        Active allow policies among `policy_references` permitting every action in `actions`.

        Each action is satisfied by the exact action or by its resource wildcard, and all actions are ANDed:
        actions=["Task:create", "Visit:create"] selects policies having
        ("Task:create" or "Task:*") and ("Visit:create" or "Visit:*").
        """
        logger.info(f"PolicyDAO - looking for actions={actions} in policies={policy_references}")

        if not policy_references:
            logger.info("PolicyDAO - no policy references provided")
            return []

        policy_ids = list(dict.fromkeys(convert_to_resource_ids(policy_references, POLICY_PREFIX)))
        stmt = select(Policy).where(
            Policy.id.in_(policy_ids),
            Policy.effect == Policy.EFFECT_ALLOW,
            Policy.status == Policy.STATUS_ACTIVE,
            Policy.is_deleted.is_(False),
        )

        for action in actions:
            resource_type = action.split(":")[0]
            stmt = stmt.where(Policy.actions.any(PolicyAction.action.in_([action, f"{resource_type}:*"])))

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
