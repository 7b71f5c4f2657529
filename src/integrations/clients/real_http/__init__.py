"""
Real HTTP integration clients.

These clients communicate with external systems via httpx:
- SSLCommerz initiation and validation APIs
- Pollinations.AI image generation

Important:
- Must implement the interfaces in src/integrations/contracts/interfaces.py
- Every call has a fixed timeout and is never retried

Switching:
The selection of mock vs real clients happens in src/api/main.py only.
"""
