# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_access.models.policy import Policy
from clinical_access.schemas.access import ResourceAccessResponse
from clinical_access.schemas.verdict import AuthorizationVerdict, PolicyAuthorizationVerdict
from clinical_access.services.auth import AuthService, uncovered_profiles
from clinical_access.services.connections import ConnectionStore
from clinical_access.services.exceptions import AuthorizationDenied
from clinical_access.services.policy_manager import PolicyManager


def _policy_manager(subject_grants: dict = None, granted_resources: list = None) -> AsyncMock:
    policy_manager = AsyncMock(spec=PolicyManager)
    policy_manager.request_subject_scoped_access.return_value = subject_grants or {}
    granted_resources = granted_resources or []
    policy_manager.request_resource_scoped_access.return_value = ResourceAccessResponse(
        granted_policies=[Policy(id="p")] if granted_resources else [],
        granted_resources=granted_resources,
    )
    return policy_manager


def test_uncovered_profiles() -> None:
    subject_to_profile_map = {
        "UserProfile/a": ["UserProfile/a", "ResearchSubject/a1"],
        "UserProfile/b": ["ResearchSubject/b1"],
        "UserProfile/c": ["UserProfile/c"],
    }
    authorized = ["ResearchSubject/a1", "ResearchSubject/b1"]
    assert uncovered_profiles(subject_to_profile_map, authorized) == ["UserProfile/a", "UserProfile/c"]


# ----------------------------------------------------------------------
# authorize_multiple_connections_based
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_multiple_system_user(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    verdict = await auth.authorize_multiple_connections_based("sys", ["UserProfile/stranger"], "Observation", "read")
    assert verdict.full_auth_granted is True


@pytest.mark.asyncio
async def test_multiple_only_self(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    verdict = await auth.authorize_multiple_connections_based(
        "patient-1", ["UserProfile/patient-1"], "Observation", "read"
    )
    assert verdict.full_auth_granted is True


@pytest.mark.asyncio
async def test_multiple_resolving_only_to_self(access_data: AsyncSession) -> None:
    """Own enrollments and own profile together are full access."""
    auth = AuthService(access_data)
    verdict = await auth.authorize_multiple_connections_based(
        "patient-1", ["UserProfile/patient-1", "ResearchSubject/rs1"], "Observation", "read"
    )
    assert verdict.full_auth_granted is True


@pytest.mark.asyncio
async def test_multiple_unresolved_reference_is_not_full(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    verdict = await auth.authorize_multiple_connections_based(
        "patient-1", ["UserProfile/patient-1", "UserProfile/missing"], "Observation", "read"
    )
    assert verdict.full_auth_granted is False
    assert not verdict.grant().permits("UserProfile/missing")


@pytest.mark.asyncio
async def test_multiple_partial_authorization(access_data: AsyncSession) -> None:
    """Owned references are granted; a stranger stays outside the covered set."""
    auth = AuthService(access_data)
    verdict = await auth.authorize_multiple_connections_based(
        "patient-1", ["UserProfile/patient-1", "UserProfile/stranger"], "Observation", "read"
    )
    assert verdict.full_auth_granted is False
    assert verdict.authorized_requestees == ["UserProfile/patient-1"]
    assert verdict.authorized_connections == []
    assert not verdict.grant().permits("UserProfile/stranger")


@pytest.mark.asyncio
async def test_multiple_connections_cover_aliases(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    requested = ["ResearchSubject/rs1", "ResearchSubject/rs-friend", "UserProfile/stranger"]
    verdict = await auth.authorize_multiple_connections_based("patient-1", requested, "Observation", "read")

    assert verdict.full_auth_granted is False
    assert verdict.authorized_requestees == ["ResearchSubject/rs1"]
    assert [connection.id for connection in verdict.authorized_connections] == ["c-friend"]
    assert verdict.subject_to_profile_map["UserProfile/friend"] == ["ResearchSubject/rs-friend"]

    grant = verdict.grant()
    assert grant.covers(["ResearchSubject/rs1", "ResearchSubject/rs-friend"])
    assert not grant.permits("UserProfile/stranger")


@pytest.mark.asyncio
async def test_multiple_policy_granted_subjects(access_data: AsyncSession) -> None:
    policy_manager = _policy_manager({"ResearchSubject/rs-stranger": [Policy(id="p")]})
    connections = AsyncMock(spec=ConnectionStore)
    connections.get_connections.return_value = []
    auth = AuthService(access_data, policy_manager=policy_manager, connections=connections)

    verdict = await auth.authorize_multiple_connections_based(
        "prac-1", ["ResearchSubject/rs-stranger", "UserProfile/friend"], "Observation", "read", ["Observation:read"]
    )

    assert verdict.authorized_requestees == ["ResearchSubject/rs-stranger"]
    # the policy covered the stranger's only requested reference, so only friend needs a connection
    connections.get_connections.assert_awaited_once()
    assert connections.get_connections.await_args.args[0] == ["UserProfile/friend"]


@pytest.mark.asyncio
async def test_multiple_policy_skipped_without_actions(access_data: AsyncSession) -> None:
    policy_manager = _policy_manager({"ResearchSubject/rs-stranger": [Policy(id="p")]})
    auth = AuthService(access_data, policy_manager=policy_manager)

    verdict = await auth.authorize_multiple_connections_based(
        "prac-1", ["ResearchSubject/rs-stranger"], "Observation", "read"
    )

    assert verdict.authorized_requestees == []
    policy_manager.request_subject_scoped_access.assert_not_awaited()


# ----------------------------------------------------------------------
# authorize_multiple_owner_based
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_owner_based_returns_early_on_ownership(access_data: AsyncSession) -> None:
    """Once anything is owned, the rest of the batch is not checked."""
    connections = AsyncMock(spec=ConnectionStore)
    auth = AuthService(access_data, connections=connections)

    verdict = await auth.authorize_multiple_owner_based(
        "patient-1", ["ResearchSubject/rs1", "UserProfile/friend"], "Observation", "read"
    )

    assert verdict.full_auth_granted is False
    assert verdict.authorized_requestees == ["ResearchSubject/rs1"]
    assert verdict.authorized_connections == []
    connections.get_connections.assert_not_awaited()


@pytest.mark.asyncio
async def test_owner_based_checks_connections_without_ownership(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    verdict = await auth.authorize_multiple_owner_based(
        "patient-1", ["ResearchSubject/rs-friend", "UserProfile/stranger"], "Observation", "read"
    )
    assert verdict.authorized_requestees == []
    assert [connection.id for connection in verdict.authorized_connections] == ["c-friend"]
    assert verdict.grant().covers(["ResearchSubject/rs-friend"])


@pytest.mark.asyncio
async def test_owner_based_policy_then_connections(access_data: AsyncSession) -> None:
    policy_manager = _policy_manager({"ResearchSubject/rs-friend": [Policy(id="p")]})
    connections = AsyncMock(spec=ConnectionStore)
    connections.get_connections.return_value = []
    auth = AuthService(access_data, policy_manager=policy_manager, connections=connections)

    verdict = await auth.authorize_multiple_owner_based(
        "prac-1", ["ResearchSubject/rs-friend", "UserProfile/stranger"], "Observation", "read", ["Observation:read"]
    )

    assert verdict.authorized_requestees == ["ResearchSubject/rs-friend"]
    assert connections.get_connections.await_args.args[0] == ["UserProfile/stranger"]


@pytest.mark.asyncio
async def test_owner_based_bypasses_validate_references(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    verdict = await auth.authorize_multiple_owner_based("sys", ["UserProfile/stranger"], "Observation", "edit")
    assert verdict.full_auth_granted is True

    with pytest.raises(AuthorizationDenied):
        await auth.authorize_multiple_owner_based("sys", ["ResearchSubject/rs-withdrawn"], "Observation", "edit")

    verdict = await auth.authorize_multiple_owner_based("stranger", ["UserProfile/friend"], "Announcement", "edit")
    assert verdict.full_auth_granted is True


# ----------------------------------------------------------------------
# authorize_policy_based / authorize_policy_manager_based
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_policy_based(access_data: AsyncSession) -> None:
    policy_manager = _policy_manager(granted_resources=["Study/1"])
    auth = AuthService(access_data, policy_manager=policy_manager)

    assert (await auth.authorize_policy_based("sys", ["Task:read"], ["Study/1"])).full_auth_granted is True
    assert (await auth.authorize_policy_based("prac-1", ["Article:read"], ["Study/1"], "Article", "read")).full_auth_granted

    verdict = await auth.authorize_policy_based("prac-1", ["Task:read"], ["Study/1", "StudySite/2"], "Task", "read")
    assert verdict.full_auth_granted is False
    assert verdict.authorized_resource_scopes == ["Study/1"]

    access_request = policy_manager.request_resource_scoped_access.await_args.args[0]
    assert access_request.requester_reference == "UserProfile/prac-1"
    assert access_request.scoped_resources == ["Study/1", "StudySite/2"]


@pytest.mark.asyncio
async def test_policy_manager_based_scopes(access_data: AsyncSession) -> None:
    auth = AuthService(access_data, policy_manager=_policy_manager(granted_resources=["Study/1", "StudySite/2"]))
    verdict = await auth.authorize_policy_manager_based(
        "prac-1", "Task", "edit", resource_scope_map={"study": ["Study/1"], "site": ["StudySite/2"]},
        resource_actions=["Task:create"],
    )
    assert isinstance(verdict, PolicyAuthorizationVerdict)
    assert verdict.authorized_resource_scopes == ["Study/1", "StudySite/2"]


@pytest.mark.asyncio
@pytest.mark.parametrize("granted", [[], ["Study/1"]])
async def test_policy_manager_based_partial_scope_denied(access_data: AsyncSession, granted: list) -> None:
    auth = AuthService(access_data, policy_manager=_policy_manager(granted_resources=granted))
    with pytest.raises(AuthorizationDenied):
        await auth.authorize_policy_manager_based(
            "prac-1", "Task", "edit", resource_scope_map={"study": ["Study/1"], "site": ["StudySite/2"]},
            resource_actions=["Task:create"],
        )


@pytest.mark.asyncio
async def test_policy_manager_based_subjects(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)

    verdict = await auth.authorize_policy_manager_based(
        "patient-1", "Observation", "read", subject_references=["ResearchSubject/rs-friend"]
    )
    assert isinstance(verdict, AuthorizationVerdict)
    assert [connection.id for connection in verdict.authorized_connections] == ["c-friend"]

    with pytest.raises(AuthorizationDenied):
        await auth.authorize_policy_manager_based(
            "patient-1", "Observation", "read", subject_references=["ResearchSubject/rs-friend", "UserProfile/stranger"]
        )


@pytest.mark.asyncio
async def test_policy_manager_based_nothing_requested(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    assert await auth.authorize_policy_manager_based("patient-1", "Observation", "read") is None


# ----------------------------------------------------------------------
# get_requester_owned_references
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_requester_owned_references(access_data: AsyncSession) -> None:
    auth = AuthService(access_data)
    requested = ["ResearchSubject/rs-withdrawn", "ResearchSubject/rs-friend", "UserProfile/patient-1", "ResearchSubject/rs1"]

    owned = await auth.get_requester_owned_references("patient-1", requested, "read")
    assert owned == ["ResearchSubject/rs-withdrawn", "ResearchSubject/rs1", "UserProfile/patient-1"]

    owned = await auth.get_requester_owned_references("patient-1", requested, "edit")
    assert owned == ["ResearchSubject/rs1", "UserProfile/patient-1"]

    assert await auth.get_requester_owned_references("patient-1", ["UserProfile/friend"], "read") == []
