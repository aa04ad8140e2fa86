# Routes package init
"""
Synapse Scribble Backend - API Routes Package
=============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - flows.py:     POST /api/flows/*           (stateless flow calls)
    - sessions.py:  /api/sessions[/{id}/...]    (session lifecycle and cycles)
    - health.py:    GET  /health                (service health check)

Routes stay thin: extract the request data, call a flow or the session
service, return the response model. Errors propagate to the global
handlers registered in main.py.
"""
