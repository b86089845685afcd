"""Services Layer — notification agent, extension steps and the expiry sweeper.

Invariants:
    - Services orchestrate IO around pure core functions
    - Extension steps are registered explicitly (no auto-discovery)
"""
