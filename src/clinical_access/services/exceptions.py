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
Service Layer Exceptions
"""


class AuthorizationError(Exception):
    """Base class for errors surfaced by the authorization core."""

    error_code = "InternalServerError"
    description = "An unexpected error occurred."

    def __init__(self, description: str | None = None):
        self.description = description or self.description
        super().__init__(self.description)


class AuthorizationDenied(AuthorizationError):
    """Raised when the requester is not allowed to access the requested resources."""

    error_code = "Forbidden"
    description = "Forbidden"


class InvalidRequest(AuthorizationError):
    """Raised when an authorization parameter is malformed."""

    error_code = "BadRequest"
    description = "Bad Request"


class ResourceNotFound(AuthorizationError):
    """Raised when a referenced primary entity does not exist."""

    error_code = "NotFound"
    description = "Not Found"
