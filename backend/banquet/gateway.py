"""API gateway: one public entry point in front of the services.

Requests to ``/api/<service>/...`` are forwarded unchanged to the upstream
configured for ``<service>``. Outside the public paths a valid bearer token
is required; the verified identity travels upstream as ``X-User-*``
headers, and any such headers sent by the client are discarded.
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse, Response

from .auth.principal import IDENTITY_HEADERS, authenticate_bearer, identity_headers
from .core.config import Settings, load_settings
from .core.observability import setup_logging
from .main import register_error_handlers
from .utils.errors import DependencyUnavailable, NotFound

logger = logging.getLogger(__name__)

HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
    "host",
    "content-length",
}
STRIPPED_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | {h.lower() for h in IDENTITY_HEADERS}
STRIPPED_RESPONSE_HEADERS = HOP_BY_HOP_HEADERS | {"content-encoding"}

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_gateway(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings)
    client = httpx.AsyncClient(timeout=settings.GATEWAY_TIMEOUT_SECONDS, transport=transport)
    public_paths = set(settings.GATEWAY_PUBLIC_PATHS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Banquet Gateway", default_response_class=ORJSONResponse, lifespan=lifespan)
    register_error_handlers(app)

    @app.get("/api/health")
    def health():
        return {"status": "ok", "service": "gateway"}

    @app.api_route("/api/{service}/{path:path}", methods=PROXY_METHODS)
    async def proxy(service: str, path: str, request: Request):
        upstream = settings.GATEWAY_ROUTES.get(service)
        if not upstream:
            raise NotFound(f"Unknown service '{service}'")

        headers = httpx.Headers(
            [
                (key, value)
                for key, value in request.headers.items()
                if key.lower() not in STRIPPED_REQUEST_HEADERS
            ]
        )
        request_path = request.url.path
        principal = None
        if request_path in public_paths:
            logger.info("Accessing public endpoint %s", request_path)
        else:
            principal = authenticate_bearer(request.headers, settings)
            headers.update(identity_headers(principal))

        logger.info(
            "Proxying request to %s",
            service,
            extra={
                "method": request.method,
                "path": request_path,
                "user_role": principal.role.value if principal else None,
            },
        )
        try:
            upstream_resp = await client.request(
                request.method,
                f"{upstream.rstrip('/')}{request_path}",
                params=list(request.query_params.multi_items()),
                headers=headers,
                content=await request.body(),
            )
        except httpx.HTTPError as exc:
            logger.error("Proxy error for %s: %s", service, exc)
            raise DependencyUnavailable(f"{service} service unavailable")

        if upstream_resp.status_code >= 400:
            logger.warning("Error response from %s: %s", service, upstream_resp.status_code)
        return Response(
            content=upstream_resp.content,
            status_code=upstream_resp.status_code,
            headers={
                key: value
                for key, value in upstream_resp.headers.items()
                if key.lower() not in STRIPPED_RESPONSE_HEADERS
            },
        )

    return app
