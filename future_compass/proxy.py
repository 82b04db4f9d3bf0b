"""
Credential Proxy

Relays chat-completions requests to the provider so the API key stays on the
server. Clients POST to /api/openai/<suffix> with the raw provider payload;
the proxy adds the bearer key and returns the upstream status, content type
and body unchanged.

Run with:
    future-compass proxy
"""

from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from future_compass.models.config import AppSettings
from future_compass.utils.credential_manager import CredentialManager
from future_compass.utils.logger import get_logger

PROXY_PREFIX = "/api/openai"
DEFAULT_SUFFIX = "/chat/completions"
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def resolve_upstream_url(upstream_base_url: str, suffix: str) -> str:
    """Join the upstream base with the path after /api/openai (default /chat/completions)."""
    suffix = suffix.strip("/")
    path = f"/{suffix}" if suffix else DEFAULT_SUFFIX
    return f"{upstream_base_url.rstrip('/')}{path}"


def create_app(
    settings: Optional[AppSettings] = None,
    credential_manager: Optional[CredentialManager] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Args:
        settings: Application settings (defaults to AppSettings.load())
        credential_manager: Source of the server-held secret (defaults to .env)
        transport: Optional httpx transport for the upstream call (tests)

    Returns:
        FastAPI app exposing /api/openai/{suffix}
    """
    settings = settings or AppSettings.load()
    credentials = credential_manager or CredentialManager(env_file=Path(".env"))
    logger = get_logger(phase="proxy", component="credential_proxy")

    app = FastAPI(title="FutureCompass credential proxy")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST"],
        allow_headers=["Content-Type"],
    )

    @app.api_route(PROXY_PREFIX, methods=ALL_METHODS)
    @app.api_route(PROXY_PREFIX + "/{suffix:path}", methods=ALL_METHODS)
    async def relay(request: Request, suffix: str = "") -> Response:
        if request.method != "POST":
            return JSONResponse(
                status_code=405,
                content={"error": "Method Not Allowed"},
                headers={"Allow": "POST"},
            )

        api_key = credentials.get_api_key(settings.proxy.api_key_env)
        if not api_key:
            logger.error("Proxy secret missing", key=settings.proxy.api_key_env)
            return JSONResponse(
                status_code=500,
                content={"error": f"{settings.proxy.api_key_env} not configured"},
            )

        target_url = resolve_upstream_url(settings.proxy.upstream_base_url, suffix)
        payload = await request.body() or b"{}"

        try:
            async with httpx.AsyncClient(
                timeout=settings.timeouts.proxy_upstream, transport=transport
            ) as client:
                upstream = await client.post(
                    target_url,
                    content=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            logger.error("OpenAI proxy error", target_url=target_url, error=str(e))
            return JSONResponse(
                status_code=500, content={"error": "Failed to reach OpenAI"}
            )

        logger.info(
            "Proxied request",
            target_url=target_url,
            status_code=upstream.status_code,
            request_bytes=len(payload),
        )
        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            media_type=upstream.headers.get("content-type", "application/json"),
        )

    return app
