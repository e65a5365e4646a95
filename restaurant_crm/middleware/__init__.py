# Middleware package init
"""
Restaurant CRM Backend - Middleware Package
============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Access Policy] → Route

    1. Request ID: correlation ID for every log line and response
    2. Logging: access log with status and duration
    3. CORS: answers preflight requests before the access gate
    4. Access Policy: rejects unauthenticated requests with 401 before any
       route or business logic runs
"""
