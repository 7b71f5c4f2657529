"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- Store credentials for the gateway are not available yet
- We want to test flows end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped like the provider's real JSON.
"""
