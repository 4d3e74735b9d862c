"""
Bridge configuration. Route paths and the protection realm come from env.
No secrets in this file; client credentials belong to the authorization server.
"""
import os

# Token endpoint path handed to the authorization server's token handler
TOKEN_PATH = os.environ.get("OAUTH2_TOKEN_PATH", "/token")

# Revocation endpoint path (RFC 7009)
REVOKE_PATH = os.environ.get("OAUTH2_REVOKE_PATH", "/revoke")

# Realm advertised in WWW-Authenticate when a protected resource rejects a request
REALM = os.environ.get("OAUTH2_REALM", "Service")
