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
Grant Algebra
A grant is either full (everything requested is allowed), or a partial set of allowed references.
The empty partial grant is "none".
"""

from typing import FrozenSet, Iterable, Optional


class Grant:
    __slots__ = ("_full", "_references")

    def __init__(self, full: bool = False, references: Optional[Iterable[str]] = None):
        self._full = full
        self._references: FrozenSet[str] = frozenset() if full else frozenset(filter(None, references or ()))

    @classmethod
    def full(cls) -> "Grant":
        return cls(full=True)

    @classmethod
    def none(cls) -> "Grant":
        return cls()

    @classmethod
    def partial(cls, references: Iterable[str]) -> "Grant":
        return cls(references=references)

    @property
    def is_full(self) -> bool:
        return self._full

    @property
    def is_none(self) -> bool:
        return not self._full and not self._references

    @property
    def references(self) -> FrozenSet[str]:
        return self._references

    def permits(self, reference: str) -> bool:
        return self._full or reference in self._references

    def covers(self, requested: Iterable[str]) -> bool:
        """True when every requested reference is permitted. An empty request is always covered."""
        if self._full:
            return True
        return set(filter(None, requested)) <= self._references

    def __or__(self, other: "Grant") -> "Grant":
        if self._full or other._full:
            return Grant.full()
        return Grant.partial(self._references | other._references)

    def __and__(self, other: "Grant") -> "Grant":
        if self._full:
            return other
        if other._full:
            return self
        return Grant.partial(self._references & other._references)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grant):
            return NotImplemented
        return self._full == other._full and self._references == other._references

    def __hash__(self) -> int:
        return hash((self._full, self._references))

    def __repr__(self) -> str:
        if self._full:
            return "<Grant(full)>"
        return f"<Grant(partial={sorted(self._references)})>"
