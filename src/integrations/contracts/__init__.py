"""
Contracts (data models).

This folder defines the request/response shapes for external integrations:
- Order records and payment initiation requests
- Abstract gateway, ledger and image provider interfaces

Both mock and real HTTP clients should use these contracts.
"""
