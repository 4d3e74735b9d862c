"""
Resource protection with an Authlib ResourceProtector (Bearer tokens, RFC 6750).
The protector validates the translated request; an OAuth2Error is raised as
HTTPException carrying the error's status, body and headers.
"""
import logging

from authlib.oauth2 import OAuth2Error
from fastapi import Depends, HTTPException, Request

from oauth2_bridge.config import REALM
from oauth2_bridge.message_bridge import new_oauth2_request

logger = logging.getLogger(__name__)


def _rejection(error: OAuth2Error) -> HTTPException:
    headers = {key: str(value) for key, value in error.get_headers()}
    if not any(key.lower() == "www-authenticate" for key in headers):
        headers["WWW-Authenticate"] = f'Bearer realm="{REALM}"'
    return HTTPException(
        status_code=error.status_code,
        detail=dict(error.get_body()),
        headers=headers,
    )


def require_token(protector, scope: str | None = None):
    """
    Dependency factory: the request must carry an access token the protector's
    validators accept for scope. Returns the token object.
    """
    scopes = [scope] if scope else None

    async def _check(request: Request):
        try:
            oauth2_request = await new_oauth2_request(request)
            return protector.validate_request(scopes, oauth2_request)
        except OAuth2Error as error:
            logger.debug("Resource request rejected path=%s error=%s", request.url.path, error.error)
            raise _rejection(error)

    return Depends(_check)
