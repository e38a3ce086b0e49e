import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .config import ADMIN_PASSWORD, ADMIN_USERNAME

logger = logging.getLogger(__name__)

ADMIN_REALM = "Admin Area"

security = HTTPBasic(realm=ADMIN_REALM, auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Authentication required",
        headers={"WWW-Authenticate": f'Basic realm="{ADMIN_REALM}"'},
    )


def require_admin(credentials: Optional[HTTPBasicCredentials] = Depends(security)) -> str:
    """Check the shared admin credentials sent with HTTP Basic authentication"""
    if credentials is None:
        raise _unauthorized()

    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), ADMIN_USERNAME.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), ADMIN_PASSWORD.encode("utf-8")
    )
    if not (username_ok and password_ok):
        logger.warning(f"⚠️ Admin authentication failed for user: {credentials.username}")
        raise _unauthorized()

    return credentials.username
