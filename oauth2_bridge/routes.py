"""
Token and revocation endpoints (POST /token, POST /revoke; paths from config).
Each request is translated for the Authlib authorization server, which answers
with a Starlette Response through its handle_response.
Grant types, client storage and token issuance are registered on the server.
"""
import logging

from authlib.oauth2.rfc7009 import RevocationEndpoint
from fastapi import APIRouter, Request

from oauth2_bridge.config import REVOKE_PATH, TOKEN_PATH
from oauth2_bridge.message_bridge import new_oauth2_request

logger = logging.getLogger(__name__)


def build_router(server) -> APIRouter:
    """
    Router bound to an oauth2_bridge.server.AuthorizationServer. /revoke needs a
    RevocationEndpoint registered on the server.
    """
    router = APIRouter()

    @router.post(TOKEN_PATH)
    async def token(request: Request):
        """Token endpoint (RFC 6749 §3.2)."""
        oauth2_request = await new_oauth2_request(request)
        response = server.create_token_response(oauth2_request)
        logger.debug("Token request handled status=%s", response.status_code)
        return response

    @router.post(REVOKE_PATH)
    async def revoke(request: Request):
        """Token revocation (RFC 7009)."""
        oauth2_request = await new_oauth2_request(request)
        response = server.create_endpoint_response(RevocationEndpoint.ENDPOINT_NAME, oauth2_request)
        logger.debug("Revoke request handled status=%s", response.status_code)
        return response

    return router
