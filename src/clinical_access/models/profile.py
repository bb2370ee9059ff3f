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
Identity Models
Defines the UserProfile and ResearchSubject tables used as the identity units for authorization.
"""

from typing import List, Optional

from sqlalchemy import JSON, Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from clinical_access.models.base import Base


class UserProfile(Base):
    """
    A platform user (system, patient, practitioner or carepartner).
    Read-only to the authorization core.
    """

    __tablename__ = "user_profile"
    __table_args__ = (Index("ix_user_profile_status", "status"),)

    TYPE_SYSTEM = "system"
    TYPE_PATIENT = "patient"
    TYPE_PRACTITIONER = "practitioner"
    TYPE_CAREPARTNER = "carepartner"

    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ACTIVE)
    family_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    given_names: Mapped[List[str]] = mapped_column(JSON, default=list)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    @property
    def display_name(self) -> str:
        return ", ".join([self.family_name or "", " ".join(self.given_names or [])])

    def __repr__(self) -> str:
        return f"<UserProfile(id='{self.id}', type='{self.type}', status='{self.status}')>"


class ResearchSubject(Base):
    """
    Enrollment of a UserProfile (the individual) in a study, optionally at a site.
    A profile may hold several enrollments, each addressable by its own reference.
    """

    __tablename__ = "research_subject"
    __table_args__ = (Index("ix_research_subject_individual", "individual_reference"),)

    # statuses that no longer allow records to be written for the subject
    WITHDRAWN_STATUSES = ("withdrawn", "ineligible", "not-registered")

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(40))
    individual_reference: Mapped[str] = mapped_column(String(128))
    study_reference: Mapped[str] = mapped_column(String(128))
    site_reference: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<ResearchSubject(id='{self.id}', individual='{self.individual_reference}')>"
