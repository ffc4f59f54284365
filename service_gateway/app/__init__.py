"""
API Gateway Service package for the HR Scenario Gateway.

The gateway fronts every client action call, enforcing:
- Routing: each action resolves to one scenario endpoint
- Authentication: gateway-issued bearer tokens
- Authorization: static role -> action permission matrix
- Byte-exact relay of scenario responses, with token injection at login

Structure:
- app.main: FastAPI app, routes, and wiring.
- app.routing: Action routing table.
- app.auth: Token issuing and verification.
- app.domain: Permission matrix, auth middleware, request building, relay.
- app.adapters: HTTP client for scenario endpoints.
"""
