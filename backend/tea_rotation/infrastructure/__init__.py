"""Infrastructure Layer — database session management and logging.

Invariants:
    - Infrastructure never imports from core/ domain logic (errors excepted)
    - All driver exceptions leave this layer as DatabaseError
"""
