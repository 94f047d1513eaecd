"""HTTP Endpoints - Webhook de uplinks, dump y exposición de métricas.

Rutas:
- POST / y POST /hook: webhook de ChirpStack (otros métodos -> 301 a /metrics)
- /dump: guarda el body tal cual, cualquier método
- GET /metrics: formato de exposición de Prometheus
- GET /health: liveness
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from ...metrics import families
from ...services import ExporterServices

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])

OTHER_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"]
ALL_METHODS = ["POST"] + OTHER_METHODS


def filter_ascii(value: Optional[str]) -> str:
    """Descarta caracteres no ASCII antes de loguear un header."""
    if not value:
        return ""
    return "".join(ch for ch in value if ord(ch) < 128)


def _strip_port(address: str) -> str:
    if address.startswith("["):
        end = address.find("]")
        return address[1:end] if end > 0 else address
    if address.count(":") == 1:
        return address.split(":", 1)[0]
    return address


def client_ip(request: Request) -> str:
    """X-Real-Ip, luego el primer X-Forwarded-For, luego el peer."""
    address = request.headers.get("x-real-ip", "").strip()
    if not address:
        forwarded = request.headers.get("x-forwarded-for", "")
        address = forwarded.split(",", 1)[0].strip()
    if not address and request.client is not None:
        address = request.client.host or ""
    return _strip_port(filter_ascii(address))


def _is_authorized(services: ExporterServices, authorization: str) -> bool:
    expected = services.settings.auth_key
    if not expected:
        return True
    return authorization in (expected, f"Bearer {expected}")


def _services(request: Request) -> ExporterServices:
    return request.app.state.services


async def _handle_webhook(request: Request) -> Response:
    services = _services(request)
    sink = services.sink
    ip = client_ip(request)
    ua = filter_ascii(request.headers.get("user-agent"))
    labels = {"ip": ip}

    sink.inc_counter(families.WEBHOOK_TOTAL, labels)

    if not _is_authorized(services, request.headers.get("authorization", "")):
        sink.inc_counter(families.WEBHOOK_ERROR_TOTAL, dict(labels))
        logger.warning("[WEBHOOK] Unauthorized request ip=%s user_agent=%s", ip, ua)
        return PlainTextResponse("unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

    body = await request.body()
    result = await run_in_threadpool(services.normalizer.normalize, body)

    filename = ""
    if services.settings.debug or result.needs_dump:
        filename = await run_in_threadpool(services.dump_store.persist, body)

    if result.error is not None:
        sink.inc_counter(families.WEBHOOK_ERROR_TOTAL, dict(labels))
        if not filename:
            filename = await run_in_threadpool(services.dump_store.persist, body)
        logger.error(
            "[WEBHOOK] Failed to parse request body ip=%s user_agent=%s dump=%s error=%s",
            ip, ua, filename, result.error,
        )
        return PlainTextResponse(result.error, status_code=status.HTTP_400_BAD_REQUEST)

    if services.forwarder.enabled:
        services.forwarder.enqueue(body)

    logger.info(
        "[WEBHOOK] Got webhook request dev_eui=%s vendor=%s dump=%s ip=%s user_agent=%s size=%d",
        result.dev_eui, result.vendor, filename, ip, ua, len(body),
    )
    return PlainTextResponse("ok")


@router.post("/")
async def webhook_root(request: Request) -> Response:
    return await _handle_webhook(request)


@router.post("/hook")
async def webhook_hook(request: Request) -> Response:
    return await _handle_webhook(request)


@router.api_route("/", methods=OTHER_METHODS, include_in_schema=False)
@router.api_route("/hook", methods=OTHER_METHODS, include_in_schema=False)
async def lost_soul(request: Request) -> Response:
    """Cualquier otro método en las rutas del webhook redirige a /metrics."""
    logger.info(
        "[WEBHOOK] Got lost soul method=%s ip=%s user_agent=%s",
        request.method, client_ip(request), filter_ascii(request.headers.get("user-agent")),
    )
    return RedirectResponse("/metrics", status_code=status.HTTP_301_MOVED_PERMANENTLY)


@router.api_route("/dump", methods=ALL_METHODS)
async def dump(request: Request) -> Response:
    services = _services(request)
    ip = client_ip(request)
    services.sink.inc_counter(families.WEBHOOK_TOTAL, {"ip": ip})
    logger.debug("[DUMP] Got request ip=%s user_agent=%s", ip, filter_ascii(request.headers.get("user-agent")))

    body = await request.body()
    filename = await run_in_threadpool(services.dump_store.persist, body)
    return PlainTextResponse(f"dumped to {filename}\n")


@router.get("/metrics")
def metrics(request: Request) -> Response:
    payload, content_type = _services(request).sink.render()
    return Response(content=payload, media_type=content_type)


@router.get("/health")
def health(request: Request):
    """Liveness probe: ok mientras el proceso esté vivo."""
    return {"status": "ok", "devices": len(_services(request).registry)}
