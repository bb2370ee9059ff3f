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
Policy Manager
Decides study/site scoped access from policy assignments, policies and care team membership.
"""

import asyncio
from typing import Dict, Iterable, List, Mapping, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinical_access.dao.care_team import CareTeamDAO
from clinical_access.dao.policy import PolicyDAO
from clinical_access.dao.policy_assignment import PolicyAssignmentDAO
from clinical_access.dao.research_subject import ResearchSubjectDAO
from clinical_access.models.policy import CareTeam, Policy, PolicyAssignment
from clinical_access.models.profile import ResearchSubject
from clinical_access.schemas.access import ResourceAccessRequest, ResourceAccessResponse, SubjectAccessRequest
from clinical_access.services.references import POLICY_PREFIX, RESEARCH_SUBJECT_PREFIX, convert_to_resource_id
from clinical_access.utils.logger import logger


def map_policy_resources(assignments: Iterable[PolicyAssignment], policy_ids: Set[str]) -> Dict[str, List[str]]:
    """
    Policy id -> scope references it was assigned in, for assignments whose policy is in `policy_ids`.
    A policy assigned in several scopes keeps all of them.
    """
    policy_resources: Dict[str, List[str]] = {}
    for assignment in assignments:
        policy_id = convert_to_resource_id(assignment.policy_reference, POLICY_PREFIX)
        if policy_id not in policy_ids:
            continue
        resources = policy_resources.get(policy_id, [])
        if assignment.resource_scope_reference not in resources:
            policy_resources = {**policy_resources, policy_id: resources + [assignment.resource_scope_reference]}
    return policy_resources


def collect_care_team_resources(care_teams: Iterable[CareTeam]) -> Set[str]:
    resources: Set[str] = set()
    for care_team in care_teams:
        if care_team.site_reference:
            resources.add(care_team.site_reference)
        if care_team.study_reference:
            resources.add(care_team.study_reference)
    return resources


def restrict_to_resources(policy_resources: Mapping[str, List[str]], allowed: Set[str]) -> Dict[str, List[str]]:
    """Keeps only the allowed scopes of each policy and drops policies left with none."""
    restricted = {
        policy_id: [resource for resource in resources if resource in allowed]
        for policy_id, resources in policy_resources.items()
    }
    return {policy_id: resources for policy_id, resources in restricted.items() if resources}


def flatten_resources(policy_resources: Mapping[str, List[str]]) -> List[str]:
    return list(dict.fromkeys(resource for resources in policy_resources.values() for resource in resources))


def subject_scope(subject: ResearchSubject) -> List[str]:
    scope = [subject.study_reference]
    if subject.site_reference:
        scope.append(subject.site_reference)
    return scope


class PolicyManager:
    """
    Policy based access for a requester.

    Policies are looked up through the requester's assignments in the requested scopes; an assigned policy only
    counts when it permits every requested action AND the requester is an active member of an active care team
    of the same study or site. Care teams never grant anything on their own.

    When `session_factory` is given, per-subject lookups of `request_subject_scoped_access` run concurrently,
    each on its own session; injected stores are used as given and only the default stores are rebuilt per
    session. Otherwise they run one after another on the shared session.
    """

    def __init__(
        self,
        db: AsyncSession,
        policy_dao: Optional[PolicyDAO] = None,
        policy_assignment_dao: Optional[PolicyAssignmentDAO] = None,
        care_team_dao: Optional[CareTeamDAO] = None,
        research_subject_dao: Optional[ResearchSubjectDAO] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.db = db
        # stores handed in by the caller, reused by the per-session managers of the concurrent path
        self._injected_stores = {
            "policy_dao": policy_dao,
            "policy_assignment_dao": policy_assignment_dao,
            "care_team_dao": care_team_dao,
        }
        self.policy_dao = policy_dao or PolicyDAO(db)
        self.policy_assignment_dao = policy_assignment_dao or PolicyAssignmentDAO(db)
        self.care_team_dao = care_team_dao or CareTeamDAO(db)
        self.research_subject_dao = research_subject_dao or ResearchSubjectDAO(db)
        self.session_factory = session_factory

    async def request_resource_scoped_access(self, access_request: ResourceAccessRequest) -> ResourceAccessResponse:
        logger.info("Inside PolicyManager :: request_resource_scoped_access()")
        response = ResourceAccessResponse(request_token=access_request.request_token)

        if not access_request.scoped_resources:
            logger.info("PolicyManager - scoped resources not available. policy based access cannot be determined.")
            return response
        if not access_request.resource_actions:
            logger.info("PolicyManager - resource actions not available. policy based access cannot be determined.")
            return response

        assignments = await self.policy_assignment_dao.find_all(
            access_request.requester_reference, access_request.scoped_resources
        )
        policies = await self.policy_dao.find_all(
            [assignment.policy_reference for assignment in assignments], access_request.resource_actions
        )
        if not policies:
            logger.info("PolicyManager - no policy permits the requested actions")
            return response

        policy_resources = map_policy_resources(assignments, {policy.id for policy in policies})
        granted_resources = flatten_resources(policy_resources)
        logger.info(f"PolicyManager - resources granted by policy: {granted_resources}")

        if granted_resources:
            care_teams = await self.care_team_dao.find_all(access_request.requester_reference, granted_resources)
            if not care_teams:
                logger.info(f"PolicyManager - care teams are not present for {granted_resources}")
                return response

            policy_resources = restrict_to_resources(policy_resources, collect_care_team_resources(care_teams))
            granted_resources = flatten_resources(policy_resources)
            policies = [policy for policy in policies if policy.id in policy_resources]
            logger.info("PolicyManager - care team validation successful")

        response.granted_policies = policies
        response.granted_resources = granted_resources
        logger.info(f"PolicyManager - granted resources={granted_resources} for token={response.request_token}")
        return response

    async def request_subject_scoped_access(self, access_request: SubjectAccessRequest) -> Dict[str, List[Policy]]:
        """
        Policies granted per ResearchSubject reference.
        A subject's scope is its study and, when present, its site. Subjects without any granted policy are left out.

        Example:
            {"ResearchSubject/1": [<Policy(id='p1')>]}
        """
        logger.info(f"PolicyManager - request subject scoped access for {access_request.subject_references}")
        subjects = await self.research_subject_dao.get_by_references(access_request.subject_references)
        if not subjects:
            logger.info("PolicyManager - subject references were not found. policy based access cannot be determined.")
            return {}

        requests = [
            ResourceAccessRequest(
                requester_reference=access_request.requester_reference,
                scoped_resources=subject_scope(subject),
                resource_actions=access_request.resource_actions,
                request_token=subject.id,
            )
            for subject in subjects
        ]

        if self.session_factory is not None:
            responses = await asyncio.gather(*(self._request_in_new_session(request) for request in requests))
        else:
            responses = [await self.request_resource_scoped_access(request) for request in requests]

        policy_grants: Dict[str, List[Policy]] = {}
        for response in responses:
            if response.granted_policies:
                logger.info(f"Access granted for research subject={response.request_token}")
                policy_grants[RESEARCH_SUBJECT_PREFIX + response.request_token] = response.granted_policies
        return policy_grants

    async def _request_in_new_session(self, access_request: ResourceAccessRequest) -> ResourceAccessResponse:
        async with self.session_factory() as session:
            manager = PolicyManager(session, **self._injected_stores)
            return await manager.request_resource_scoped_access(access_request)
