"""
Authlib AuthorizationServer for Starlette. Grants, endpoints and token
generators are registered by the caller the usual Authlib way; this class only
plugs in the request translation and response mapping of message_bridge.
"""
import logging

from authlib.oauth2 import AuthorizationServer as _AuthorizationServer
from starlette.responses import Response

from oauth2_bridge.message_bridge import StarletteOAuth2Request, map_response

logger = logging.getLogger(__name__)


class AuthorizationServer(_AuthorizationServer):
    """
    Client lookup and token persistence are callables supplied by the application:
    query_client(client_id) -> client, save_token(token, request).
    Requests must already be translated with new_oauth2_request (it needs an await).
    """

    def __init__(self, query_client=None, save_token=None, scopes_supported=None):
        super().__init__(scopes_supported=scopes_supported)
        self._query_client = query_client
        self._save_token = save_token

    def query_client(self, client_id):
        return self._query_client(client_id)

    def save_token(self, token, request):
        return self._save_token(token, request)

    def create_oauth2_request(self, request):
        if not isinstance(request, StarletteOAuth2Request):
            raise TypeError("Translate the request with new_oauth2_request() first")
        return request

    def create_json_request(self, request):
        return self.create_oauth2_request(request)

    def handle_response(self, status_code, payload, headers):
        return map_response((status_code, payload, headers), Response(media_type="application/json"))

    def send_signal(self, name, *args, **kwargs):
        logger.debug("Authorization server signal %s", name)
