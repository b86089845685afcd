"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure implements core boundary protocols; it holds no notification policy
    - External failures are mapped to core/errors.py types
"""
