"""Enums for model fields."""

from enum import StrEnum


class ContactCategory(StrEnum):
    """Fixed set of contact categories."""

    FAMILY = "Family"
    FRIEND = "Friend"
    WORK = "Work"
    OTHER = "Other"


class LoginMethod(StrEnum):
    """How a user account authenticates."""

    LOCAL = "local"
