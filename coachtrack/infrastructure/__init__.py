"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/ protocols but never decides domain rules
    - All external calls wrapped with timeout and error mapping to core/errors.py

Design Decisions:
    - Resilient wrappers over raw clients (ADR: ExMA single responsibility)
"""
