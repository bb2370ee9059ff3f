# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from pydantic import BaseModel, ConfigDict, Field


class ProfileInfo(BaseModel):
    """
    Attributes of an active profile needed for authorization decisions.
    """

    profile_type: str = Field(alias="profileType")
    profile_status: str = Field(alias="profileStatus")
    display_name: str = Field(alias="displayName")

    model_config = ConfigDict(populate_by_name=True, frozen=True)
