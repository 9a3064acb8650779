# Services package init
"""
LinguaHub Backend — Services Layer
====================================

What:  Business logic layer sitting between routes (HTTP) and the document
       store (persistence).
How:   Each service is a stateless singleton; the request's session and the
       shared FileService are passed in per call.

Service Inventory:
    - FileService:     upload validation, storage under uploads/ and
                       resources/, cleanup and served-path resolution
    - UserService:     registration, profile read/update, password update
    - AdminService:    admin credential check
    - CatalogService:  package, bundle and FAQ listings
    - PackageService:  package creation with per-question media
    - ExamService:     exam history read and submission
"""
