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
Profile Directory
Validates that profile and research subject references denote active, non-deleted profiles
and resolves research subjects to the individual they represent.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.dao.research_subject import ResearchSubjectDAO
from clinical_access.models.profile import ResearchSubject, UserProfile
from clinical_access.schemas.access import AccessType, ResearchSubjectCriteria
from clinical_access.schemas.profile import ProfileInfo
from clinical_access.schemas.reference import ReferenceKind
from clinical_access.services.exceptions import AuthorizationDenied
from clinical_access.services.references import (
    RESEARCH_SUBJECT_PREFIX,
    USER_PROFILE_PREFIX,
    convert_to_resource_id,
    convert_to_resource_ids,
    get_unique_references,
)
from clinical_access.utils.logger import logger

EDIT_CRITERIA = ResearchSubjectCriteria(excluded_statuses=ResearchSubject.WITHDRAWN_STATUSES)


def fold_subject_aliases(
    profile_map: Mapping[str, List[str]], subjects: Iterable[ResearchSubject], requested_profiles: Set[str]
) -> Dict[str, List[str]]:
    """
    Adds each subject's reference under the profile of its individual.
    A profile introduced only through a subject starts without itself unless it was requested directly.
    """
    folded = {profile: list(originals) for profile, originals in profile_map.items()}
    for subject in subjects:
        profile = subject.individual_reference
        originals = folded.get(profile, [profile] if profile in requested_profiles else [])
        folded[profile] = originals + [RESEARCH_SUBJECT_PREFIX + subject.id]
    return folded


class ProfileDirectory:
    def __init__(self, db: AsyncSession, research_subject_dao: Optional[ResearchSubjectDAO] = None):
        self.db = db
        self.research_subject_dao = research_subject_dao or ResearchSubjectDAO(db)

    async def get_user_profile(self, profile_ids: Iterable[Optional[str]]) -> Dict[str, ProfileInfo]:
        """
        Profile attributes keyed by id, only if every requested profile is active and not deleted.

        Example:
            {"1111": ProfileInfo(profile_type="patient", profile_status="active", display_name="Stark, Tony")}

        Raises:
            AuthorizationDenied: the input is empty, or any id is missing, inactive or deleted.
        """
        logger.info("Entering ProfileDirectory :: get_user_profile()")
        unique_ids = list(dict.fromkeys(profile_ids or []))
        if not unique_ids:
            logger.error("ProfileDirectory: profiles list is empty")
            raise AuthorizationDenied()

        stmt = select(UserProfile).where(
            UserProfile.id.in_([profile_id for profile_id in unique_ids if profile_id]),
            UserProfile.status == UserProfile.STATUS_ACTIVE,
            UserProfile.is_deleted.is_(False),
        )
        result = await self.db.execute(stmt)
        profiles = list(result.scalars().all())

        if len(profiles) != len(unique_ids):
            logger.error("ProfileDirectory: record doesn't exist for all requested profile ids")
            raise AuthorizationDenied()

        return {
            profile.id: ProfileInfo(
                profile_type=profile.type,
                profile_status=profile.status,
                display_name=profile.display_name,
            )
            for profile in profiles
        }

    async def get_valid_user_profile_ids(self, profile_ids: Iterable[str]) -> Set[str]:
        """Ids among `profile_ids` that are active and not deleted. Missing ones are simply left out."""
        ids = list(dict.fromkeys(profile_ids))
        if not ids:
            return set()
        stmt = select(UserProfile.id).where(
            UserProfile.id.in_(ids),
            UserProfile.status == UserProfile.STATUS_ACTIVE,
            UserProfile.is_deleted.is_(False),
        )
        result = await self.db.execute(stmt)
        return set(result.scalars().all())

    async def get_research_subject_profiles(
        self,
        owner_reference: Optional[str],
        information_source_reference: Optional[str] = None,
        criteria: Optional[ResearchSubjectCriteria] = None,
    ) -> Dict[str, str]:
        """
        Maps each ResearchSubject reference among the two inputs to its individual's UserProfile reference.

        Examples:
            ("ResearchSubject/1", "ResearchSubject/2") -> {"ResearchSubject/1": "UserProfile/11", "ResearchSubject/2": "UserProfile/22"}
            ("ResearchSubject/1", "UserProfile/22") -> {"ResearchSubject/1": "UserProfile/11"}
            ("UserProfile/11", "UserProfile/22") -> {}

        Raises:
            AuthorizationDenied: a subject does not exist, is deleted or is excluded by `criteria`.
        """
        subject_references = get_unique_references(
            [owner_reference, information_source_reference], RESEARCH_SUBJECT_PREFIX
        )
        if not subject_references:
            return {}

        subject_ids = convert_to_resource_ids(subject_references, RESEARCH_SUBJECT_PREFIX)
        subjects = await self.research_subject_dao.find_by_ids(subject_ids, criteria)
        if len(subjects) != len(set(subject_ids)):
            logger.error("ProfileDirectory: record doesn't exist for all requested research subject ids")
            raise AuthorizationDenied()

        individuals = {subject.id: subject.individual_reference for subject in subjects}
        return {
            reference: individuals[convert_to_resource_id(reference, RESEARCH_SUBJECT_PREFIX)]
            for reference in subject_references
        }

    async def validate_profiles(
        self, profile_references: Iterable[Optional[str]], criteria: Optional[ResearchSubjectCriteria] = None
    ) -> Dict[str, List[str]]:
        """
        Resolves a mixed batch of UserProfile and ResearchSubject references to valid profiles.

        Returns a map from each active, non-deleted profile reference to the requested references
        (itself and/or its subjects) that resolve to it. Unresolvable references are dropped silently.
        """
        logger.info("Entering ProfileDirectory :: validate_profiles()")
        references = list(profile_references or [])
        user_profile_references = get_unique_references(references, USER_PROFILE_PREFIX)
        subject_references = get_unique_references(references, RESEARCH_SUBJECT_PREFIX)

        profile_map: Dict[str, List[str]] = {reference: [reference] for reference in user_profile_references}
        if subject_references:
            subjects = await self.research_subject_dao.find_by_ids(
                convert_to_resource_ids(subject_references, RESEARCH_SUBJECT_PREFIX), criteria
            )
            profile_map = fold_subject_aliases(profile_map, subjects, set(user_profile_references))

        valid_ids = await self.get_valid_user_profile_ids(
            convert_to_resource_id(profile, USER_PROFILE_PREFIX) for profile in profile_map if profile
        )
        logger.info("Exiting ProfileDirectory :: validate_profiles()")
        return {
            profile: originals
            for profile, originals in profile_map.items()
            if convert_to_resource_id(profile, USER_PROFILE_PREFIX) in valid_ids
        }

    async def validate_profile_references(self, profile_references: Iterable[Optional[str]], access_type: str) -> None:
        """
        Makes sure owner/information source references of a bypassed (system or public) request are valid.
        Read access is not validated.

        Raises:
            AuthorizationDenied: any reference does not resolve to an active profile.
        """
        logger.info("Entering ProfileDirectory :: validate_profile_references()")
        references = [reference for reference in profile_references or [] if reference]
        if not references:
            logger.info("No references present to validate")
            return
        if access_type == AccessType.READ:
            logger.info("Access type is read, references are not validated")
            return

        accepted_kinds = (ReferenceKind.USER_PROFILE.value, ReferenceKind.RESEARCH_SUBJECT.value)
        filtered: List[str] = []
        for reference in references:
            kind, separator, _ = reference.partition("/")
            if not separator:
                filtered.append(USER_PROFILE_PREFIX + reference)
            elif kind in accepted_kinds:
                filtered.append(reference)
        filtered = list(dict.fromkeys(filtered))

        profile_map = await self.validate_profiles(filtered, EDIT_CRITERIA)
        resolved = {original for originals in profile_map.values() for original in originals}
        if len(resolved) != len(filtered):
            logger.error("ProfileDirectory: record doesn't exist for all requested profile references")
            raise AuthorizationDenied()
        logger.info("Exiting ProfileDirectory :: validate_profile_references()")
