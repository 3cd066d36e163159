import asyncio
import json
import logging
from typing import Any

from infra.log_config import setup_logging
from infra.settings import settings
from infra.wiring import build_sender, build_transport, load_signing_identity
from apns_push.domain.entities import (
    DeliveryOutcome,
    DeliveryTarget,
    Environment,
    GatewayRejection,
    NotificationContent,
    NotificationPayload,
    SigningIdentity,
)
from apns_push.domain.errors import PushError
from apns_push.domain.services.rejection_interpreter import interpret

setup_logging()
logger = logging.getLogger(__name__)


def _parse_record(payload: dict) -> tuple[DeliveryTarget, NotificationPayload]:
    topic = payload.get("topic") or settings.APNS_TOPIC
    if not topic:
        raise ValueError("Registro sem topic e APNS_TOPIC não configurado")
    target = DeliveryTarget(
        device_token=payload["device_token"],
        topic=topic,
        environment=Environment.parse(payload.get("environment") or settings.APNS_ENVIRONMENT),
    )
    content = NotificationContent(
        alert=payload["alert"],
        content_available=payload.get("content_available", 0),
        badge=payload.get("badge"),
        sound=payload.get("sound"),
        category=payload.get("category"),
        thread_id=payload.get("thread_id"),
    )
    return target, NotificationPayload(aps=content, custom_key=payload.get("custom_key"))


def _summarize(target: DeliveryTarget, outcome: DeliveryOutcome) -> dict[str, Any]:
    summary = {
        "device_token": target.device_token,
        "ok": outcome.ok,
        "status_code": outcome.status_code,
        "apns_id": outcome.apns_id,
    }
    if isinstance(outcome, GatewayRejection):
        summary["reason"] = interpret(outcome).reason.value
    return summary


def _summarize_error(target: DeliveryTarget, error: PushError) -> dict[str, Any]:
    return {
        "device_token": target.device_token,
        "ok": False,
        "status_code": None,
        "apns_id": None,
        "error": f"{type(error).__name__}: {error}",
    }


async def _send_batch(identity: SigningIdentity, jobs: list[tuple[DeliveryTarget, NotificationPayload]]) -> list[dict]:
    # One HTTP/2 connection multiplexes every send in the batch; it stays open
    # until every send has settled.
    async with build_transport(settings) as transport:
        sender = build_sender(settings, transport=transport)
        outcomes = await asyncio.gather(
            *(sender.send(identity, target, payload) for target, payload in jobs),
            return_exceptions=True,
        )

    results = []
    for (target, _), outcome in zip(jobs, outcomes):
        if isinstance(outcome, PushError):
            results.append(_summarize_error(target, outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(_summarize(target, outcome))
    return results


def handler(event, _context):
    """
    Trigger: SQS → Records (batch).
    Cada body é um pedido de push. Rejeições do gateway e erros de chave,
    payload ou transporte voltam no resultado por registro, depois que todos
    os envios terminam; outras exceções propagam para o runtime.
    """
    jobs = []
    for record in event["Records"]:
        body = record["body"]
        payload = json.loads(body) if isinstance(body, str) else body
        jobs.append(_parse_record(payload))

    identity = load_signing_identity(settings)
    results = asyncio.run(_send_batch(identity, jobs))
    for r in results:
        if not r["ok"]:
            logger.warning(
                "Push falhou: status=%s reason=%s error=%s", r["status_code"], r.get("reason"), r.get("error")
            )
    return {"ok": all(r["ok"] for r in results), "results": results}
