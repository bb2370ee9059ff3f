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

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from clinical_access.models.base import Base


class Connection(Base):
    """
    Directed grant between two profiles.
    `from_reference` is the profile whose data is shared, `to_reference` the profile
    allowed to act on or view it.
    """

    __tablename__ = "connection"
    __table_args__ = (
        Index("ix_connection_from", "from_reference"),
        Index("ix_connection_to", "to_reference"),
    )

    TYPE_PARTNER = "partner"
    TYPE_DELEGATE = "delegate"
    TYPE_FRIEND = "friend"

    STATUS_ACTIVE = "active"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    from_reference: Mapped[str] = mapped_column(String(128))
    to_reference: Mapped[str] = mapped_column(String(128))
    type: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20))
    request_expiration_date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<Connection(id='{self.id}', from='{self.from_reference}', to='{self.to_reference}', type='{self.type}')>"
