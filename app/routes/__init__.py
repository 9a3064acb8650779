# Routes package init
"""
LinguaHub Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - users.py:    POST /register, GET /profile, PUT /profile/update,
                   PUT /update-password
    - admin.py:    POST /admin/login
    - catalog.py:  GET /get-all-packages, /get-all-bundles, /get-faqs
    - packages.py: POST /add-package
    - exams.py:    GET /get-exam-history, POST /submit-exam
    - files.py:    GET /uploads/{path}, GET /resources/{path}
    - health.py:   GET /, GET /health

Design Principle:
    Routes are thin: they pull inputs out of the request, call a service,
    and return its result. Errors are raised as app exceptions and turned
    into responses by the global handlers in main.py.
"""
