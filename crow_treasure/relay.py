"""Chat-completion relay — keeps the provider API key out of the client.

GET (or POST with an empty body) answers a liveness message. A POST with a
JSON body is forwarded unchanged to the provider with bearer auth, and the
provider's status code and body are passed straight back.
"""

from __future__ import annotations

import json
import logging

import httpx
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from crow_treasure.config import Settings, load_settings

logger = logging.getLogger(__name__)

ALIVE_MESSAGE = "deepseek function is alive. Send a POST with JSON body to use it."


def create_router(settings: Settings) -> APIRouter:
    router = APIRouter()

    @router.get("/deepseek")
    async def alive():
        return {"ok": True, "message": ALIVE_MESSAGE}

    @router.post("/deepseek")
    async def forward(request: Request):
        raw = await request.body()
        if not raw:
            return {"ok": True, "message": ALIVE_MESSAGE}

        if not settings.provider_api_key:
            return JSONResponse({"error": "Missing DEEPSEEK_API_KEY"}, status_code=500)

        try:
            body = json.loads(raw)
            async with httpx.AsyncClient(timeout=None) as client:
                resp = await client.post(
                    settings.provider_url,
                    json=body,
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {settings.provider_api_key}",
                    },
                )
        except (ValueError, httpx.HTTPError) as e:
            logger.error("relay forward failed: %s", e)
            return JSONResponse({"error": str(e)}, status_code=500)

        logger.debug("relay forwarded status=%s len=%d", resp.status_code, len(resp.content))
        return Response(
            content=resp.content,
            status_code=resp.status_code,
            media_type="application/json",
        )

    return router


def create_app(settings: Settings | None = None) -> FastAPI:
    resolved = settings or load_settings()
    app = FastAPI(title="Crow's Treasure relay")
    app.include_router(create_router(resolved), prefix="/api")
    return app
