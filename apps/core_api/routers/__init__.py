"""
FastAPI Routers.

Contains:
- agent: /agent/messages, /agent/confirmations
- health: GET /healthz, /readyz
- metrics: GET /metrics
"""

__all__ = ["agent", "health", "metrics"]
