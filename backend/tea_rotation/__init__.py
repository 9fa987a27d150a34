"""Tea Rotation Application Package — drink orders and fair tea-maker assignment.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
