"""
LinguaHub Backend
==================

HTTP API for the LinguaHub language-learning platform.

    routes/      HTTP surface, one module per resource group
    services/    account, catalog, package and exam rules
    models/      document tables (SQLAlchemy)
    schemas/     request/response contracts (Pydantic)
    middleware/  rate limiting, request IDs, access log

The DocumentStore and FileService are built once at startup and handed to
handlers through app.state.
"""

__version__ = "1.0.0"
