"""
Framework-side views of a Starlette request for the OAuth2 server.
server_params builds the CGI-style environment (REQUEST_METHOD, HTTP_*, ...) from
the ASGI scope; request_headers gives Camel-Case header names with list values,
plus the Php-Auth-* entries an HTTP server derives from Authorization.
"""
import base64

from starlette.requests import Request

# Headers that appear in the environment without the HTTP_ prefix
_UNPREFIXED = {"CONTENT_TYPE", "CONTENT_LENGTH"}

# Credential entries only the server may set; client-sent copies stay in HTTP_* server params
_SERVER_SET = {"Php-Auth-User", "Php-Auth-Pw", "Php-Auth-Digest", "Auth-Type"}


def camel_case(name: str) -> str:
    """content-type -> Content-Type."""
    return "-".join(part.capitalize() for part in name.split("-"))


def _parse_basic(credentials: str) -> tuple[str, str] | None:
    """Parse base64(user:password) from a Basic Authorization value. Returns (user, password) or None."""
    try:
        decoded = base64.b64decode(credentials.strip(), validate=True).decode("utf-8")
    except ValueError:
        return None
    if ":" not in decoded:
        return None
    user, _, password = decoded.partition(":")
    return user, password


def _authorization_headers(header_value: str) -> dict[str, list[str]]:
    scheme, _, credentials = header_value.strip().partition(" ")
    scheme = scheme.lower()
    if scheme == "basic":
        basic = _parse_basic(credentials)
        if basic is None:
            return {}
        user, password = basic
        return {"Php-Auth-User": [user], "Php-Auth-Pw": [password], "Auth-Type": ["Basic"]}
    if scheme == "digest":
        return {"Php-Auth-Digest": [credentials.strip()], "Auth-Type": ["Digest"]}
    return {}


def request_headers(request: Request) -> dict[str, list[str]]:
    """
    Request headers keyed Camel-Case, values in arrival order. Php-Auth-* and
    Auth-Type come from Authorization only, never from the client directly.
    """
    headers: dict[str, list[str]] = {}
    for key, value in request.headers.items():
        name = camel_case(key)
        if name in _SERVER_SET:
            continue
        headers.setdefault(name, []).append(value)
    authorization = request.headers.get("authorization")
    if authorization:
        headers.update(_authorization_headers(authorization))
    return headers


def server_params(request: Request) -> dict[str, str]:
    """CGI-style server parameters for the request. HTTPS is only present for https."""
    scope = request.scope
    query_string = scope.get("query_string", b"").decode("latin-1")
    path = scope.get("path", "")
    root_path = scope.get("root_path", "")
    path_info = path[len(root_path):] if root_path and path.startswith(root_path) else path
    # REQUEST_URI keeps the percent-encoding the client sent
    raw_path = scope.get("raw_path")
    uri_path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else path

    params = {
        "REQUEST_METHOD": request.method,
        "REQUEST_URI": f"{uri_path}?{query_string}" if query_string else uri_path,
        "QUERY_STRING": query_string,
        "SCRIPT_NAME": root_path,
        "PATH_INFO": path_info,
        "SERVER_PROTOCOL": f"HTTP/{scope.get('http_version', '1.1')}",
    }

    server = scope.get("server")
    if server:
        host, port = server[0], server[1]
    else:
        host, port = request.url.hostname or "", request.url.port
    params["SERVER_NAME"] = host
    if port is not None:
        params["SERVER_PORT"] = str(port)

    if request.client is not None:
        params["REMOTE_ADDR"] = request.client.host
        params["REMOTE_PORT"] = str(request.client.port)

    if request.url.scheme in ("https", "wss"):
        params["HTTPS"] = "on"

    for key, value in request.headers.items():
        name = key.upper().replace("-", "_")
        if name not in _UNPREFIXED:
            name = f"HTTP_{name}"
        params[name] = f"{params[name]},{value}" if name in params else value
    return params
