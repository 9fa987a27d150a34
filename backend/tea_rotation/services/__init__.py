"""Services Layer — async orchestration over the database.

Invariants:
    - Pure decisions live in core/; services load state, call core, persist results
    - Services raise TeaRotationError subclasses, never HTTPException
"""
