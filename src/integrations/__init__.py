"""
Integrations layer.
This package contains all code used to communicate with external systems:
- SSLCommerz payment gateway (checkout sessions, validation API)
- Pollinations.AI image generation

Key rule:
- API routes MUST NOT call external APIs directly.
- Routes call services (under src/integrations/services), which call clients.
- Mock clients are used when INTEGRATIONS_MODE=mock; real HTTP clients otherwise.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/main.py).
"""
