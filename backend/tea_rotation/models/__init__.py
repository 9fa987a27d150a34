"""ORM Models — SQLAlchemy declarative models for users, sessions and orders.

Invariants:
    - All models inherit from Base (db/base.py)
    - Session is the aggregate root for orders

Design Decisions:
    - One file per table
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from tea_rotation.models.user import User  # noqa: F401
from tea_rotation.models.session import Session  # noqa: F401
from tea_rotation.models.order import Order  # noqa: F401
