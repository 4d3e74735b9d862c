"""
Bridge between Starlette requests/responses and Authlib's OAuth2 messages.
new_oauth2_request snapshots a Starlette request as an Authlib OAuth2Request;
map_response writes an Authlib (status, body, headers) endpoint response back
onto a Starlette Response.
Stateless: every call works only on the objects it is given.
"""
import io
import json
import logging
from collections.abc import Mapping

from authlib.oauth2.rfc6749.requests import BasicOAuth2Payload, OAuth2Request
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import Response

from oauth2_bridge.environ import request_headers, server_params

logger = logging.getLogger(__name__)

HeaderValue = str | int | list[str] | tuple[str, ...]

# Header keys are Camel-Case on the request side; the OAuth2 server reads these in CAPS_CASE
_HEADER_MAP = {
    "Php-Auth-User": "PHP_AUTH_USER",
    "Php-Auth-Pw": "PHP_AUTH_PW",
    "Php-Auth-Digest": "PHP_AUTH_DIGEST",
    "Auth-Type": "AUTH_TYPE",
}

FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class StarletteOAuth2Request(OAuth2Request):
    """
    Authlib request holding a single-valued snapshot of a Starlette request.
    args is the query, form (and payload) the parsed body. The Starlette-side
    extras (attributes, cookies, files, server, content) ride along for grants
    and validators that want them.
    """

    def __init__(
        self,
        method: str,
        uri: str,
        query: dict,
        body: dict,
        attributes: dict,
        cookies: dict,
        server: dict,
        content: io.BytesIO,
        headers: dict,
    ):
        super().__init__(method=method, uri=uri, headers=headers)
        self.payload = BasicOAuth2Payload(dict(body))
        self._args = dict(query)
        self.attributes = dict(attributes)
        self.cookies = dict(cookies)
        # uploads are not supported
        self.files: dict = {}
        self.server = dict(server)
        self.content = content

    @property
    def args(self) -> dict:
        return self._args

    @property
    def form(self) -> dict:
        return self.payload.data


def _media_type(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


async def _parsed_body(request: Request, body: bytes) -> dict | None:
    """Form fields or JSON object sent in the body; None when there is nothing parseable."""
    media_type = _media_type(request)
    if media_type in FORM_MEDIA_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items() if not isinstance(value, UploadFile)}
    if media_type == "application/json" or media_type.endswith("+json"):
        if not body.strip():
            return None
        try:
            data = json.loads(body)
        except ValueError:
            logger.warning("Ignoring %s request body: not valid JSON", media_type)
            return None
        return data if isinstance(data, dict) else None
    return None


async def new_oauth2_request(request: Request) -> StarletteOAuth2Request:
    """
    Build an Authlib OAuth2Request from a Starlette request.

    Query, parsed body, path params, cookies and server params are copied; a body
    that could not be parsed becomes {}. Files are never passed on. Header names
    are cleaned up for the OAuth2 server (see _cleanup_headers).
    Endpoints using this must not declare Form/Body params: the body is read here.
    """
    body = await request.body()
    post = await _parsed_body(request, body)
    if post is None:
        post = {}
    return StarletteOAuth2Request(
        method=request.method,
        uri=str(request.url),
        query=dict(request.query_params),
        body=post,
        attributes=dict(request.path_params),
        cookies=dict(request.cookies),
        server=server_params(request),
        content=io.BytesIO(body),
        headers=_cleanup_headers(request_headers(request)),
    )


def _render_body(body) -> bytes | str:
    if body is None:
        return ""
    if isinstance(body, (dict, list)):
        return json.dumps(body)
    return body


def map_response(endpoint_response: tuple, response: Response) -> Response:
    """
    Copy an Authlib (status_code, body, headers) endpoint response onto the
    Starlette response, in place; the response is returned. Dict bodies are
    JSON encoded, strings are written as they are. 1xx, 204 and 304 carry no body.
    """
    status_code, body, headers = endpoint_response
    pairs = headers.items() if isinstance(headers, Mapping) else (headers or [])
    for key, value in pairs:
        response.headers[key] = str(value)
    response.status_code = status_code
    logger.debug("Mapped OAuth2 response status=%s", status_code)

    if status_code < 200 or status_code in (204, 304):
        response.body = b""
        del response.headers["content-length"]
        return response
    rendered = _render_body(body)
    if isinstance(rendered, str):
        rendered = rendered.encode(response.charset)
    response.body = rendered
    response.headers["content-length"] = str(len(response.body))
    return response


def _cleanup_headers(unclean_headers: Mapping[str, HeaderValue]) -> dict[str, str | int]:
    """
    Rename the credential headers listed in _HEADER_MAP to CAPS_CASE and reduce
    every value to a scalar. Other names are kept as they are.
    If two source keys end up on the same name, the later one wins.
    """
    clean_headers: dict[str, str | int] = {}
    for key, value in unclean_headers.items():
        target = _HEADER_MAP.get(key, key)
        if target in clean_headers:
            logger.warning("Header %s overrides an earlier %s header", key, target)
        clean_headers[target] = _reduce_header(value)
    return clean_headers


def _reduce_header(value: HeaderValue) -> str | int:
    """
    ["123"] -> "123"; ["1", "2"] -> "1,2"; scalars are returned unchanged.
    """
    if isinstance(value, (list, tuple)):
        if len(value) == 1:
            return value[0]
        return ",".join(str(item) for item in value)
    return value
