"""Domain Types — enums that replace raw status and sugar strings across the codebase.

Invariants:
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - str Enums: serialize to JSON and compare against DB strings without custom encoders
"""

from enum import Enum


class SessionStatus(str, Enum):
    """Session lifecycle states — maps to DB `status` column. Never reopened."""
    ACTIVE = "active"
    COMPLETED = "completed"


class SugarLevel(str, Enum):
    """Sugar preference offered by the order form."""
    NO_SUGAR = "No Sugar"
    LESS = "Less"
    NORMAL = "Normal"
