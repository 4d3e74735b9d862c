"""
Pytest configuration for oauth2_bridge. Default route paths and realm, plain-http
TestClient URLs allowed by Authlib, and an in-memory client/token store wired
into a real Authlib authorization server and resource protector.
"""
import os

import pytest
from authlib.oauth2.rfc6749 import ClientMixin, ResourceProtector, TokenMixin
from authlib.oauth2.rfc6749.grants import ClientCredentialsGrant
from authlib.oauth2.rfc6750 import BearerTokenGenerator, BearerTokenValidator
from authlib.oauth2.rfc7009 import RevocationEndpoint

from oauth2_bridge.server import AuthorizationServer

# Config is read at import; keep defaults regardless of the developer's env
for _name in ("OAUTH2_TOKEN_PATH", "OAUTH2_REVOKE_PATH", "OAUTH2_REALM"):
    os.environ.pop(_name, None)
# TestClient talks http://testserver
os.environ["AUTHLIB_INSECURE_TRANSPORT"] = "1"

CLIENT_ID = "test_client_id"
CLIENT_SECRET = "test_secret"


class Client(ClientMixin):
    def __init__(self, client_id, client_secret):
        self.client_id = client_id
        self.client_secret = client_secret

    def get_client_id(self):
        return self.client_id

    def get_default_redirect_uri(self):
        return None

    def get_allowed_scope(self, scope):
        return scope

    def check_redirect_uri(self, redirect_uri):
        return False

    def check_client_secret(self, client_secret):
        return client_secret == self.client_secret

    def check_endpoint_auth_method(self, method, endpoint):
        return method in ("client_secret_basic", "client_secret_post")

    def check_token_endpoint_auth_method(self, method):
        return self.check_endpoint_auth_method(method, "token")

    def check_response_type(self, response_type):
        return False

    def check_grant_type(self, grant_type):
        return grant_type == "client_credentials"


class Token(TokenMixin):
    def __init__(self, access_token, client_id, scope):
        self.access_token = access_token
        self.client_id = client_id
        self.scope = scope
        self.revoked = False

    def check_client(self, client):
        return client.get_client_id() == self.client_id

    def get_scope(self):
        return self.scope

    def get_expires_in(self):
        return 3600

    def is_expired(self):
        return False

    def is_revoked(self):
        return self.revoked


class Store:
    """Clients and tokens for one test; records every request the server saw."""

    def __init__(self):
        self.clients = {CLIENT_ID: Client(CLIENT_ID, CLIENT_SECRET)}
        self.tokens = {"good-token": Token("good-token", CLIENT_ID, "api.read")}
        self.requests = []

    def query_client(self, client_id):
        return self.clients.get(client_id)

    def save_token(self, token, request):
        self.requests.append(request)
        self.tokens[token["access_token"]] = Token(token["access_token"], request.client.get_client_id(), token.get("scope", ""))


class ClientCredentials(ClientCredentialsGrant):
    TOKEN_ENDPOINT_AUTH_METHODS = ["client_secret_basic", "client_secret_post"]


def _revocation_endpoint(store):
    class TokenRevocation(RevocationEndpoint):
        def query_token(self, token_string, token_type_hint):
            return store.tokens.get(token_string)

        def revoke_token(self, token, request):
            store.requests.append(request)
            token.revoked = True

    return TokenRevocation


class TokenValidator(BearerTokenValidator):
    def __init__(self, store, realm=None):
        super().__init__(realm=realm)
        self.store = store

    def authenticate_token(self, token_string):
        return self.store.tokens.get(token_string)


@pytest.fixture
def store():
    return Store()


@pytest.fixture
def server(store):
    authorization = AuthorizationServer(query_client=store.query_client, save_token=store.save_token)
    authorization.register_grant(ClientCredentials)
    authorization.register_endpoint(_revocation_endpoint(store))
    authorization.register_token_generator(
        "default",
        BearerTokenGenerator(access_token_generator=lambda **kwargs: "issued-token"),
    )
    return authorization


@pytest.fixture
def protector(store):
    resource_protector = ResourceProtector()
    resource_protector.register_token_validator(TokenValidator(store, realm="Service"))
    return resource_protector
