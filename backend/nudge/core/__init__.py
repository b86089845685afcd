"""Core Layer — pure notification domain logic, no network, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are deterministic given their inputs (time is passed in as epoch ms)
"""
