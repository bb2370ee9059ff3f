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
Authorization Service
Decides whether a requester may read or write records owned by other profiles.

Single owner checks return `[]` for unrestricted access or the list of connections the access rests on,
and raise AuthorizationDenied otherwise. Batch checks return a verdict describing what was granted.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.dao.organization import OrganizationLevelDefaultsDAO
from clinical_access.dao.research_subject import ResearchSubjectDAO
from clinical_access.models.connection import Connection
from clinical_access.models.organization import OrganizationLevelDefaults
from clinical_access.models.profile import UserProfile
from clinical_access.schemas.access import (
    AccessType,
    AuthorizationRequest,
    ResearchSubjectCriteria,
    ResourceAccessRequest,
    SubjectAccessRequest,
)
from clinical_access.schemas.profile import ProfileInfo
from clinical_access.schemas.reference import ReferenceKind
from clinical_access.schemas.verdict import AuthorizationVerdict, PolicyAuthorizationVerdict
from clinical_access.services.connections import ConnectionStore
from clinical_access.services.exceptions import AuthorizationDenied
from clinical_access.services.grants import Grant
from clinical_access.services.policy_manager import PolicyManager
from clinical_access.services.profiles import EDIT_CRITERIA, ProfileDirectory
from clinical_access.services.references import (
    RESEARCH_SUBJECT_PREFIX,
    USER_PROFILE_PREFIX,
    convert_to_resource_id,
    convert_to_resource_ids,
    convert_to_resource_reference,
    get_unique_references,
    is_reference_of,
    remove_references,
)
from clinical_access.utils.logger import logger

CAREGIVER_TYPES = (UserProfile.TYPE_PRACTITIONER, UserProfile.TYPE_CAREPARTNER)
WRITE_CONNECTION_TYPES = [Connection.TYPE_PARTNER, Connection.TYPE_DELEGATE]
SHARING_CONNECTION_TYPES = [Connection.TYPE_FRIEND, Connection.TYPE_PARTNER, Connection.TYPE_DELEGATE]
ACTIVE_CONNECTION = [Connection.STATUS_ACTIVE]

PUBLIC_ACCESS = {
    OrganizationLevelDefaults.PUBLIC_READ_WRITE: (AccessType.READ, AccessType.EDIT),
    OrganizationLevelDefaults.PUBLIC_READ_ONLY: (AccessType.READ,),
}


def is_system_user(profiles: Mapping[str, ProfileInfo], profile_id: str) -> bool:
    profile = profiles.get(profile_id)
    return profile is not None and profile.profile_type.lower() == UserProfile.TYPE_SYSTEM


def flatten_originals(subject_to_profile_map: Mapping[str, List[str]]) -> List[str]:
    return list(dict.fromkeys(original for originals in subject_to_profile_map.values() for original in originals))


def uncovered_profiles(subject_to_profile_map: Mapping[str, List[str]], authorized: Iterable[str]) -> List[str]:
    """
    Profiles that still need a connection check: at least one of the requested references
    mapped to the profile was not authorized yet.
    """
    authorized_set = set(authorized)
    return [
        profile
        for profile, originals in subject_to_profile_map.items()
        if any(original not in authorized_set for original in originals)
    ]


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        profiles: Optional[ProfileDirectory] = None,
        connections: Optional[ConnectionStore] = None,
        policy_manager: Optional[PolicyManager] = None,
        organization_defaults: Optional[OrganizationLevelDefaultsDAO] = None,
        research_subject_dao: Optional[ResearchSubjectDAO] = None,
    ):
        self.db = db
        self.research_subject_dao = research_subject_dao or ResearchSubjectDAO(db)
        self.profiles = profiles or ProfileDirectory(db, self.research_subject_dao)
        self.connections = connections or ConnectionStore(db)
        self.policy_manager = policy_manager or PolicyManager(db, research_subject_dao=self.research_subject_dao)
        self.organization_defaults = organization_defaults or OrganizationLevelDefaultsDAO(db)

    @staticmethod
    def get_research_subject_filter_criteria(access_type: Optional[str]) -> Optional[ResearchSubjectCriteria]:
        """Edit access excludes withdrawn subjects; read access adds no criteria."""
        if access_type == AccessType.EDIT:
            return EDIT_CRITERIA
        return None

    async def get_resource_access_level(self, resource_type: Optional[str], access_type: Optional[str]) -> bool:
        """
        True when the organization defaults make `resource_type` public for `access_type`.

        public-read-write: any valid user may read and edit without a connection
        public-read-only: any valid user may read without a connection
        private (or no row): access follows sharing rules
        """
        configured = await self.organization_defaults.get_access_type(resource_type)
        if configured is None:
            logger.info(f"Record not found in OrganizationLevelDefaults for resource type: {resource_type}")
            return False
        return access_type in PUBLIC_ACCESS.get(configured, ())

    async def authorize_request(
        self,
        requester: str,
        information_source_reference: str,
        owner_reference: str,
        resource_type: str,
        access_type: str,
        owner_type: Optional[str] = None,
    ) -> List[Connection]:
        """
        Write time check for a record of `owner_reference` submitted by `information_source_reference`.

        A system user may submit for anyone, and a user may submit for itself. Otherwise the requester must be
        the information source, be a practitioner or carepartner, and hold an active partner/delegate connection
        from the owner.

        Raises:
            AuthorizationDenied: any profile is invalid, the owner type does not match or no connection exists.
        """
        logger.info("Entering AuthService :: authorize_request()")
        criteria = self.get_research_subject_filter_criteria(access_type)
        subject_profiles = await self.profiles.get_research_subject_profiles(
            owner_reference, information_source_reference, criteria
        )
        information_source_reference = subject_profiles.get(information_source_reference, information_source_reference)
        owner_reference = subject_profiles.get(owner_reference, owner_reference)
        information_source_id = convert_to_resource_id(information_source_reference, USER_PROFILE_PREFIX)
        owner_id = convert_to_resource_id(owner_reference, USER_PROFILE_PREFIX)

        fetched_profiles = await self.profiles.get_user_profile([requester, information_source_id, owner_id])

        if owner_type and fetched_profiles[owner_id].profile_type != owner_type:
            logger.error(f"Owner is not a valid {owner_type}")
            raise AuthorizationDenied()

        if is_system_user(fetched_profiles, requester):
            logger.info("Exiting AuthService, requester is a system user :: authorize_request()")
            return []

        if requester == information_source_id == owner_id:
            logger.info("Exiting AuthService, user is submitting request for self :: authorize_request()")
            return []

        if await self.get_resource_access_level(resource_type, access_type):
            logger.info("Exiting AuthService, resource type is public :: authorize_request()")
            return []

        if requester != information_source_id or fetched_profiles[information_source_id].profile_type not in CAREGIVER_TYPES:
            logger.error("Information source is not the requester or is of an unsupported profile type")
            raise AuthorizationDenied()

        logger.info("Requester is a practitioner or carepartner submitting for the owner, checking connection")
        connections = await self.connections.has_connection(
            owner_reference, information_source_reference, WRITE_CONNECTION_TYPES, ACTIVE_CONNECTION
        )
        if not connections:
            logger.error("No connection found between from user and to user")
            raise AuthorizationDenied()
        logger.info("Exiting AuthService, found a connection :: authorize_request()")
        return connections

    async def authorize_request_sharing_rules(self, request: AuthorizationRequest) -> List[Connection]:
        """
        Write time check following sharing rules.

        Returns `[]` for unrestricted access, or the connections whose sharing rules the caller must evaluate.
        When the owner is a ResearchSubject and actions are given, policy based access is tried before
        falling back to a friend/partner/delegate connection.
        """
        logger.info(
            f"Entering AuthService :: authorize_request_sharing_rules() requester={request.requester}, "
            f"owner_reference={request.owner_reference}"
        )
        requester_profiles = await self.profiles.get_user_profile([request.requester])
        profile_references = [request.owner_reference, request.information_source_reference]

        if is_system_user(requester_profiles, request.requester):
            await self.profiles.validate_profile_references(profile_references, request.access_type)
            logger.info("Requester is a system user submitting for a valid owner")
            return []

        if await self.get_resource_access_level(request.resource_type, request.access_type):
            await self.profiles.validate_profile_references(profile_references, request.access_type)
            logger.info("Exiting AuthService, resource type is public :: authorize_request_sharing_rules()")
            return []

        if not request.owner_reference or not request.information_source_reference:
            logger.error("Owner or information source is required for a non-public resource.")
            raise AuthorizationDenied()

        owner_subject_reference = (
            request.owner_reference if is_reference_of(request.owner_reference, ReferenceKind.RESEARCH_SUBJECT) else None
        )
        criteria = self.get_research_subject_filter_criteria(request.access_type)
        subject_profiles = await self.profiles.get_research_subject_profiles(
            request.owner_reference, request.information_source_reference, criteria
        )
        information_source_reference = subject_profiles.get(
            request.information_source_reference, request.information_source_reference
        )
        owner_reference = subject_profiles.get(request.owner_reference, request.owner_reference)
        information_source_id = convert_to_resource_id(information_source_reference, USER_PROFILE_PREFIX)
        owner_id = convert_to_resource_id(owner_reference, USER_PROFILE_PREFIX)

        fetched_profiles = await self.profiles.get_user_profile([request.requester, information_source_id, owner_id])

        if request.owner_type and fetched_profiles[owner_id].profile_type != request.owner_type:
            logger.error(f"Owner is not a valid {request.owner_type}")
            raise AuthorizationDenied()

        if request.requester == information_source_id == owner_id:
            logger.info("Exiting AuthService, user is submitting its own request :: authorize_request_sharing_rules()")
            return []

        if await self._is_subject_policy_granted(request.requester, owner_subject_reference, request.resource_actions):
            logger.info("Exiting AuthService, policy based access was granted :: authorize_request_sharing_rules()")
            return []

        return await self._require_connection(owner_id, request.requester, SHARING_CONNECTION_TYPES)

    async def authorize_connection_based(
        self, requester_id: str, requestee_reference: str, resource_type: str, access_type: str
    ) -> List[Connection]:
        """
        Read time check of `requester_id` against a single requestee (UserProfile or ResearchSubject reference).
        """
        logger.info("Inside AuthService :: authorize_connection_based()")
        criteria = self.get_research_subject_filter_criteria(access_type)
        subject_profiles = await self.profiles.get_research_subject_profiles(requestee_reference, None, criteria)
        requestee_reference = subject_profiles.get(requestee_reference, requestee_reference)
        requestee_id = convert_to_resource_id(requestee_reference, USER_PROFILE_PREFIX)

        fetched_profiles = await self.profiles.get_user_profile([requester_id, requestee_id])

        if is_system_user(fetched_profiles, requester_id):
            logger.info("Exiting AuthService, requester is system user :: authorize_connection_based()")
            return []

        if requester_id == requestee_id:
            logger.info("Exiting AuthService, requester and requestee are the same profile :: authorize_connection_based()")
            return []

        if await self.get_resource_access_level(resource_type, access_type):
            logger.info("Exiting AuthService, resource type is public :: authorize_connection_based()")
            return []

        logger.info("Requester is not a system user. Checking for a connection between requester and requestee.")
        return await self._require_connection(requestee_id, requester_id, WRITE_CONNECTION_TYPES)

    async def authorize_connection_based_sharing_rules(self, request: AuthorizationRequest) -> List[Connection]:
        """
        Read time check following sharing rules. Only the owner is required for a private resource.
        """
        logger.info(
            f"Entering AuthService :: authorize_connection_based_sharing_rules() requester={request.requester}, "
            f"owner_reference={request.owner_reference}"
        )
        requester_profiles = await self.profiles.get_user_profile([request.requester])
        profile_references = [request.owner_reference, request.information_source_reference]

        if is_system_user(requester_profiles, request.requester):
            await self.profiles.validate_profile_references(profile_references, request.access_type)
            logger.info("Requester is a system user reading for a valid owner")
            return []

        if await self.get_resource_access_level(request.resource_type, request.access_type):
            await self.profiles.validate_profile_references(profile_references, request.access_type)
            logger.info("Exiting AuthService, resource type is public :: authorize_connection_based_sharing_rules()")
            return []

        if not request.owner_reference:
            logger.error("Owner is required for a non-public resource.")
            raise AuthorizationDenied()

        criteria = self.get_research_subject_filter_criteria(request.access_type)
        subject_profiles = await self.profiles.get_research_subject_profiles(request.owner_reference, None, criteria)
        requestee_reference = subject_profiles.get(request.owner_reference, request.owner_reference)
        requestee_id = convert_to_resource_id(requestee_reference, USER_PROFILE_PREFIX)

        fetched_profiles = await self.profiles.get_user_profile([request.requester, requestee_id])

        if request.owner_type and fetched_profiles[requestee_id].profile_type != request.owner_type:
            logger.error(f"Owner is not a valid {request.owner_type}")
            raise AuthorizationDenied()

        if request.requester == requestee_id:
            logger.info("Exiting AuthService, requester and requestee are the same profile")
            return []

        owner_subject_reference = (
            request.owner_reference if is_reference_of(request.owner_reference, ReferenceKind.RESEARCH_SUBJECT) else None
        )
        if await self._is_subject_policy_granted(request.requester, owner_subject_reference, request.resource_actions):
            logger.info("Exiting AuthService, policy based access was granted :: authorize_connection_based_sharing_rules()")
            return []

        return await self._require_connection(requestee_id, request.requester, SHARING_CONNECTION_TYPES)

    async def authorize_multiple_connections_based(
        self,
        requester_id: str,
        requestee_ids: List[str],
        resource_type: str,
        access_type: str,
        resource_actions: Optional[List[str]] = None,
    ) -> AuthorizationVerdict:
        """
        Batch read check of `requester_id` against UserProfile/ResearchSubject references.

        Full access is granted to a system user and to a requester asking only for itself. Otherwise the verdict
        lists owned references and policy granted subjects in `authorized_requestees`, and the connections found
        for every profile not fully covered by them in `authorized_connections`.
        """
        logger.info("Entering AuthService :: authorize_multiple_connections_based()")
        verdict = AuthorizationVerdict()
        requester_profiles = await self.profiles.get_user_profile([requester_id])

        if is_system_user(requester_profiles, requester_id):
            logger.info("Exiting AuthService, requester is system user :: authorize_multiple_connections_based()")
            return verdict

        if self._is_only_self(requester_id, requestee_ids):
            logger.info("Exiting AuthService, requester asked only for itself :: authorize_multiple_connections_based()")
            return verdict

        criteria = self.get_research_subject_filter_criteria(access_type)
        subject_to_profile_map = await self.profiles.validate_profiles(requestee_ids, criteria)
        verdict.subject_to_profile_map = subject_to_profile_map
        logger.info(f"AuthService :: valid requestees = {list(subject_to_profile_map)}")

        if self._resolves_only_to_self(requester_id, requestee_ids, subject_to_profile_map):
            logger.info("Exiting AuthService, requestees all resolve to the requester :: authorize_multiple_connections_based()")
            return verdict

        verdict.full_auth_granted = False

        owned_references = await self.get_requester_owned_references(requester_id, requestee_ids, AccessType.READ)
        logger.info(f"AuthService :: requester owned references = {owned_references}")
        verdict.authorized_requestees = owned_references

        remaining = remove_references(requestee_ids, owned_references)
        verdict.authorized_requestees = verdict.authorized_requestees + await self._policy_granted_subjects(
            requester_id, remaining, resource_actions
        )
        logger.info(f"AuthService :: authorized requestees = {verdict.authorized_requestees}")

        for_connection_check = uncovered_profiles(subject_to_profile_map, verdict.authorized_requestees)
        logger.info(f"AuthService :: checking connections for {for_connection_check}")
        verdict.authorized_connections = await self.connections.get_connections(
            for_connection_check, requester_id, SHARING_CONNECTION_TYPES, ACTIVE_CONNECTION
        )
        logger.info("Exiting AuthService :: authorize_multiple_connections_based()")
        return verdict

    async def authorize_multiple_owner_based(
        self,
        requester_id: str,
        requestee_ids: List[str],
        resource_type: str,
        access_type: str,
        resource_actions: Optional[List[str]] = None,
    ) -> AuthorizationVerdict:
        """
        Batch check like `authorize_multiple_connections_based`, with system and public bypasses validating the
        requested references, and an early exit: once the requester owns any of the requested references only
        those are returned, without policy or connection checks for the rest of the batch.
        """
        logger.info("Entering AuthService :: authorize_multiple_owner_based()")
        verdict = AuthorizationVerdict()
        requester_profiles = await self.profiles.get_user_profile([requester_id])

        if is_system_user(requester_profiles, requester_id):
            await self.profiles.validate_profile_references(requestee_ids, access_type)
            logger.info("Exiting AuthService, requester is system user :: authorize_multiple_owner_based()")
            return verdict

        if await self.get_resource_access_level(resource_type, access_type):
            await self.profiles.validate_profile_references(requestee_ids, access_type)
            logger.info("Exiting AuthService, resource type is public :: authorize_multiple_owner_based()")
            return verdict

        if self._is_only_self(requester_id, requestee_ids):
            logger.info("Exiting AuthService, requester asked only for itself :: authorize_multiple_owner_based()")
            return verdict

        criteria = self.get_research_subject_filter_criteria(access_type)
        subject_to_profile_map = await self.profiles.validate_profiles(requestee_ids, criteria)
        verdict.subject_to_profile_map = subject_to_profile_map

        if self._resolves_only_to_self(requester_id, requestee_ids, subject_to_profile_map):
            logger.info("Exiting AuthService, requestees all resolve to the requester :: authorize_multiple_owner_based()")
            return verdict

        verdict.full_auth_granted = False

        valid_references = flatten_originals(subject_to_profile_map)
        owned_references = await self.get_requester_owned_references(requester_id, valid_references, AccessType.READ)
        logger.info(f"AuthService :: requester owned references = {owned_references}")
        if owned_references:
            verdict.authorized_requestees = owned_references
            return verdict

        verdict.authorized_requestees = await self._policy_granted_subjects(
            requester_id, valid_references, resource_actions
        )

        for_connection_check = uncovered_profiles(subject_to_profile_map, verdict.authorized_requestees)
        if for_connection_check:
            logger.info(f"AuthService :: checking connections for {for_connection_check}")
            verdict.authorized_connections = await self.connections.get_connections(
                for_connection_check, requester_id, SHARING_CONNECTION_TYPES, ACTIVE_CONNECTION
            )
        logger.info("Exiting AuthService :: authorize_multiple_owner_based()")
        return verdict

    async def authorize_policy_based(
        self,
        requester_id: str,
        resource_actions: Optional[List[str]],
        resource_scope: List[str],
        resource_type: Optional[str] = None,
        access_type: Optional[str] = None,
    ) -> PolicyAuthorizationVerdict:
        """
        Study/site scoped check. The caller compares `authorized_resource_scopes` with `resource_scope`
        (or uses `verdict.grant().covers(resource_scope)`) to tell full, partial and no access apart.
        """
        logger.info("Entering AuthService :: authorize_policy_based()")
        verdict = PolicyAuthorizationVerdict()
        requester_profiles = await self.profiles.get_user_profile([requester_id])

        if is_system_user(requester_profiles, requester_id):
            logger.info("Exiting AuthService, requester is system user :: authorize_policy_based()")
            return verdict

        if await self.get_resource_access_level(resource_type, access_type):
            logger.info("Exiting AuthService, resource type is public :: authorize_policy_based()")
            return verdict

        verdict.full_auth_granted = False
        response = await self.policy_manager.request_resource_scoped_access(
            ResourceAccessRequest(
                requester_reference=USER_PROFILE_PREFIX + requester_id,
                scoped_resources=resource_scope,
                resource_actions=resource_actions,
            )
        )
        if response.granted_policies:
            logger.info(f"Access granted for resources = {response.granted_resources}")
            verdict.authorized_resource_scopes = list(response.granted_resources)

        logger.info("Exiting AuthService :: authorize_policy_based()")
        return verdict

    async def authorize_policy_manager_based(
        self,
        requester_id: str,
        resource_type: str,
        access_type: str,
        resource_scope_map: Optional[Mapping[str, List[str]]] = None,
        subject_references: Optional[List[str]] = None,
        resource_actions: Optional[List[str]] = None,
    ) -> Optional[Union[AuthorizationVerdict, PolicyAuthorizationVerdict]]:
        """
        Requires access to every scope in `resource_scope_map` and to every reference in `subject_references`.

        Returns the verdict of the last check performed (None when nothing was requested).

        Raises:
            AuthorizationDenied: any requested scope or subject is not covered.
        """
        logger.info("Entering AuthService :: authorize_policy_manager_based()")
        verdict = None

        if resource_scope_map:
            resource_scope = [scope for scopes in resource_scope_map.values() for scope in scopes]
            verdict = await self.authorize_policy_based(
                requester_id, resource_actions, resource_scope, resource_type, access_type
            )
            grant = verdict.grant()
            if not verdict.full_auth_granted and (grant.is_none or not grant.covers(resource_scope)):
                logger.error("Policy based access was not granted for all requested resource scopes")
                raise AuthorizationDenied()
            logger.info("Requester has access to all requested resource scopes")

        if subject_references:
            verdict = await self.authorize_multiple_owner_based(
                requester_id, subject_references, resource_type, access_type, resource_actions
            )
            if not verdict.grant().covers(subject_references):
                logger.error("Requester has no access to all requested subjects")
                raise AuthorizationDenied()

        logger.info("Exiting AuthService :: authorize_policy_manager_based()")
        return verdict

    async def get_requester_owned_references(
        self, requester_profile_id: str, requested_profiles: List[str], access_type: Optional[str]
    ) -> List[str]:
        """
        Requested references the requester owns outright: its own ResearchSubject enrollments (not deleted, and
        not withdrawn for edit access) and its own UserProfile reference when it was requested.
        """
        subject_references = get_unique_references(requested_profiles, RESEARCH_SUBJECT_PREFIX)
        requester_reference = convert_to_resource_reference(requester_profile_id, USER_PROFILE_PREFIX)

        owned: List[str] = []
        if subject_references:
            subjects = await self.research_subject_dao.find_by_ids(
                convert_to_resource_ids(subject_references, RESEARCH_SUBJECT_PREFIX),
                self.get_research_subject_filter_criteria(access_type),
                individual_reference=requester_reference,
            )
            owned_ids = {subject.id for subject in subjects}
            owned = [
                reference
                for reference in subject_references
                if convert_to_resource_id(reference, RESEARCH_SUBJECT_PREFIX) in owned_ids
            ]

        if requester_reference in requested_profiles:
            owned.append(requester_reference)
        return owned

    async def _policy_granted_subjects(
        self, requester_id: str, references: List[str], resource_actions: Optional[List[str]]
    ) -> List[str]:
        subject_references = get_unique_references(references, RESEARCH_SUBJECT_PREFIX)
        if not subject_references or not resource_actions:
            logger.info("AuthService :: no subjects or no resource actions, skipping policy based access")
            return []

        grants = await self.policy_manager.request_subject_scoped_access(
            SubjectAccessRequest(
                requester_reference=USER_PROFILE_PREFIX + requester_id,
                subject_references=subject_references,
                resource_actions=resource_actions,
            )
        )
        if not grants:
            logger.info("AuthService :: policy based access was not granted, checking connection based access")
        return list(grants)

    async def _is_subject_policy_granted(
        self, requester_id: str, subject_reference: Optional[str], resource_actions: Optional[List[str]]
    ) -> bool:
        if not subject_reference or not resource_actions:
            logger.info("AuthService :: owner is not a ResearchSubject or no resource actions, skipping policy check")
            return False
        return subject_reference in await self._policy_granted_subjects(requester_id, [subject_reference], resource_actions)

    async def _require_connection(self, from_profile: str, to_profile: str, types: List[str]) -> List[Connection]:
        connections = await self.connections.has_connection(from_profile, to_profile, types, ACTIVE_CONNECTION)
        if not connections:
            logger.error("No connection found between from user and to user")
            raise AuthorizationDenied()
        logger.info("Exiting AuthService, requester and requestee are connected")
        return connections

    @staticmethod
    def _is_only_self(requester_id: str, requestee_ids: Optional[List[str]]) -> bool:
        return (
            bool(requestee_ids)
            and len(requestee_ids) == 1
            and convert_to_resource_reference(requestee_ids[0], USER_PROFILE_PREFIX) == USER_PROFILE_PREFIX + requester_id
        )

    @staticmethod
    def _resolves_only_to_self(
        requester_id: str, requestee_ids: List[str], subject_to_profile_map: Dict[str, List[str]]
    ) -> bool:
        # every requested reference must have resolved to the requester
        if list(subject_to_profile_map) != [USER_PROFILE_PREFIX + requester_id]:
            return False
        return Grant.partial(flatten_originals(subject_to_profile_map)).covers(requestee_ids)
