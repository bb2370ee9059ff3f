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
Policy Models
Defines Policy, PolicyAssignment and CareTeam, the tables behind study/site scoped access.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_access.models.base import Base


class Policy(Base):
    """
    Static permission document.
    Its actions are `ResourceType:verb` or `ResourceType:*` strings.
    """

    __tablename__ = "policy"

    EFFECT_ALLOW = "allow"
    STATUS_ACTIVE = "active"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ACTIVE)
    effect: Mapped[str] = mapped_column(String(20), default=EFFECT_ALLOW)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    actions: Mapped[List["PolicyAction"]] = relationship(
        "PolicyAction", back_populates="policy", cascade="all, delete-orphan", lazy="selectin"
    )

    @property
    def action(self) -> List[str]:
        return [policy_action.action for policy_action in self.actions]

    def __repr__(self) -> str:
        return f"<Policy(id='{self.id}', name='{self.name}')>"


class PolicyAction(Base):
    __tablename__ = "policy_action"
    __table_args__ = (Index("ix_policy_action_action", "action"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    policy_id: Mapped[str] = mapped_column(String(64), ForeignKey("policy.id"), nullable=False)
    action: Mapped[str] = mapped_column(String(128))

    policy: Mapped["Policy"] = relationship("Policy", back_populates="actions")


class PolicyAssignment(Base):
    """
    Grants `policy_reference` to `principal_reference` within `resource_scope_reference`
    (a Study or StudySite).
    """

    __tablename__ = "policy_assignment"
    __table_args__ = (
        Index("ix_policy_assignment_principal", "principal_reference"),
        Index("ix_policy_assignment_scope", "resource_scope_reference"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    principal_reference: Mapped[str] = mapped_column(String(128))
    resource_scope_reference: Mapped[str] = mapped_column(String(128))
    policy_reference: Mapped[str] = mapped_column(String(128))
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return (
            f"<PolicyAssignment(id='{self.id}', principal='{self.principal_reference}', "
            f"scope='{self.resource_scope_reference}', policy='{self.policy_reference}')>"
        )


class CareTeam(Base):
    """
    Roster of profiles associated with a study and/or site.
    Used only to veto policy grants, never to grant.
    """

    __tablename__ = "care_team"

    STATUS_ACTIVE = "active"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ACTIVE)
    study_reference: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    site_reference: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    period_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    participants: Mapped[List["CareTeamParticipant"]] = relationship(
        "CareTeamParticipant", back_populates="care_team", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<CareTeam(id='{self.id}', study='{self.study_reference}', site='{self.site_reference}')>"


class CareTeamParticipant(Base):
    __tablename__ = "care_team_participant"
    __table_args__ = (Index("ix_care_team_participant_member", "member_reference"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    care_team_id: Mapped[str] = mapped_column(String(64), ForeignKey("care_team.id"), nullable=False)
    member_reference: Mapped[str] = mapped_column(String(128))
    status: Mapped[str] = mapped_column(String(20))
    period_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    care_team: Mapped["CareTeam"] = relationship("CareTeam", back_populates="participants")
