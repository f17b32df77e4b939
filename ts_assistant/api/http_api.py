"""
HTTP transport for the assistant.

Endpoints:
- ``POST /api/chat``: {sessionId, message} -> {reply, intent, privacy}
- ``POST /api/slots``: next free meeting slots
- ``POST /api/leads`` / ``/api/tickets`` / ``/api/book``: mock webhooks that
  append straight to the JSON collections
- ``GET /health``

Bodies are parsed from the raw request and validated here; malformed input
gets a 400 ``{"error": ...}`` and a failed write a 503. Everything else is
delegated to ``DialogueRouter``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ts_assistant.config import AppConfig, settings
from ts_assistant.conversation.router import DialogueRouter, InvalidRequestError
from ts_assistant.schemas.session_schema import Domain
from ts_assistant.tools.availability import format_slot, parse_slot
from ts_assistant.tools.storage import RecordStore, build_stores
from ts_assistant.utils import sanitize_input

logger = logging.getLogger(__name__)

MISSING_FIELDS_ERROR = "Campos mínimos não informados."
INVALID_BODY_ERROR = "Corpo da requisição deve ser um objeto JSON."
WRITE_FAILED_ERROR = "Não foi possível salvar agora. Tente novamente em instantes."

# Webhook name -> (collection, required fields)
WEBHOOKS: dict[str, tuple[Domain, tuple[str, ...]]] = {
    "leads": (Domain.LEAD, ("name", "email")),
    "tickets": (Domain.SUPPORT, ("description", "contact")),
    "book": (Domain.SCHEDULE, ("slot", "interest", "contact")),
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_body(request: Request) -> Union[dict[str, Any], JSONResponse]:
    try:
        body = await request.json()
    except ValueError:
        return _error(400, INVALID_BODY_ERROR)
    if not isinstance(body, dict):
        return _error(400, INVALID_BODY_ERROR)
    return body


def _clean_payload(body: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitise string values; drop anything that is not a JSON scalar."""
    cleaned: dict[str, Any] = {}
    for key, value in body.items():
        if isinstance(value, str):
            cleaned[str(key)] = sanitize_input(value)
        elif isinstance(value, (int, float, bool)) or value is None:
            cleaned[str(key)] = value
    return cleaned


def create_app(
    router: Optional[DialogueRouter] = None,
    stores: Optional[Mapping[Domain, RecordStore]] = None,
    config: AppConfig = settings,
) -> FastAPI:
    """Build the FastAPI app around one router and its collections."""
    stores = stores if stores is not None else build_stores(config.storage)
    router = router or DialogueRouter.from_config(config, stores=stores)

    app = FastAPI(title=f"{config.business.assistant_name} API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.allowed_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.state.router = router
    app.state.stores = stores

    @app.post("/api/chat")
    async def chat(request: Request):
        body = await _read_body(request)
        if isinstance(body, JSONResponse):
            return body
        try:
            response = await router.submit(body.get("sessionId"), body.get("message"))
        except InvalidRequestError as exc:
            logger.info("Rejected chat request: %s", exc)
            return _error(400, "message e sessionId são obrigatórios.")

        content = {
            "reply": response.reply,
            "intent": response.intent.value,
            "privacy": response.privacy,
        }
        if response.submission_failed:
            return JSONResponse(status_code=503, content=content)
        return content

    @app.post("/api/slots")
    async def slots():
        schedule = router.flows[Domain.SCHEDULE]
        return {"slots": await schedule.available_slots()}

    async def _webhook(name: str, request: Request):
        body = await _read_body(request)
        if isinstance(body, JSONResponse):
            return body
        domain, required = WEBHOOKS[name]
        payload = _clean_payload(body)
        if any(not payload.get(key) for key in required):
            return _error(400, MISSING_FIELDS_ERROR)
        if domain == Domain.SCHEDULE:
            moment = parse_slot(str(payload["slot"]))
            if moment is None:
                return _error(400, "slot deve seguir o formato dd/mm/aaaa HH:MM.")
            # Stored in the form the slot generator compares against.
            payload["slot"] = format_slot(moment, config.business.timezone_label)

        payload["created_at"] = datetime.now(timezone.utc).isoformat()
        if not await stores[domain].append_one(payload):
            return _error(503, WRITE_FAILED_ERROR)
        logger.info("Record saved via %s webhook", name)
        return {"status": "ok"}

    @app.post("/api/leads")
    async def leads(request: Request):
        return await _webhook("leads", request)

    @app.post("/api/tickets")
    async def tickets(request: Request):
        return await _webhook("tickets", request)

    @app.post("/api/book")
    async def book(request: Request):
        return await _webhook("book", request)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
