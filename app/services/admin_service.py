"""
LinguaHub Backend — Admin Authentication
==========================================

What:  Checks admin login attempts against the configured credentials.
Why:   The admin account is not a user document; it lives in configuration
       (ADMIN_EMAIL / ADMIN_PASSWORD).

No token or session is issued. A successful login only tells the admin
client that the credentials are right; other endpoints do not check it.
"""

import logging

from app.config import Settings
from app.exceptions import AuthenticationError
from app.schemas.user import AdminLoginResponse
from app.security import credentials_match

logger = logging.getLogger(__name__)


class AdminService:

    def login(self, settings: Settings, email: str, password: str) -> AdminLoginResponse:
        if not credentials_match(email, password, settings.admin_email, settings.admin_password):
            logger.warning("Rejected admin login for %s", email)
            raise AuthenticationError(message="Invalid admin credentials")

        logger.info("Admin login succeeded for %s", email)
        return AdminLoginResponse(success=True)


admin_service = AdminService()
