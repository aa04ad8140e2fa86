# Middleware package init
"""
Synapse Scribble Backend - Middleware Package
=============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Rate Limit] → [CORS] → Route Handler

    Rejected requests still carry a request ID and an access-log line;
    the logging middleware reads the ID set by RequestIDMiddleware.
"""
