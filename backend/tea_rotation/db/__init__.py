"""Database Infrastructure — SQLAlchemy Base and standalone session factory.

Invariants:
    - All ORM models inherit from db.base.Base
    - Request handlers get sessions from infrastructure/database.py, not from here
"""
