# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from clinical_access.models.base import Base


class OrganizationLevelDefaults(Base):
    """
    Organization wide access level of a resource type.
    `access_type` is one of public-read-write, public-read-only or private.
    """

    __tablename__ = "organization_level_defaults"

    PUBLIC_READ_WRITE = "public-read-write"
    PUBLIC_READ_ONLY = "public-read-only"
    PRIVATE = "private"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    resource_type: Mapped[str] = mapped_column(String(128), index=True)
    access_type: Mapped[str] = mapped_column(String(40))
