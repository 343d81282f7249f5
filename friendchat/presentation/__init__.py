"""
Presentation Layer - API endpoints and request/response handling.

This layer contains:
- api/: FastAPI routers and endpoints (HTTP + the live conversations WebSocket)
- dependencies/: JWT authentication dependency
"""
