"""Services Layer — async orchestration of the pure core over boundary protocols.

Invariants:
    - Services receive repositories and gateways through __init__ (no module globals)
    - Every state change is authorized through AccessControl first
    - Services flush through repositories but never commit; routes own the transaction

Design Decisions:
    - One service per component (access, assignments, reports, images, trends,
      profiles, retention) for locality (ADR: ExMA no god objects)
"""
