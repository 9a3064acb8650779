# Middleware package init
"""
LinguaHub Backend — Middleware
================================

Request path through the stack (see create_app):

    RateLimitMiddleware      refuse over-limit clients with 429
    RequestIDMiddleware      assign X-Request-ID, expose it to logs and errors
    RequestLoggingMiddleware one access-log line per request
    GZip, CORS               Starlette built-ins
"""
