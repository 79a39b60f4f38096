"""
Slate Agent FastAPI Application.

Main API server providing:
- /agent/messages: Agent turns and chat history
- /agent/confirmations: Plan approval and status
- /healthz, /readyz: Health checks
- /metrics: Prometheus metrics
"""

