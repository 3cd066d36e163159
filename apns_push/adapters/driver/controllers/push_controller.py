import logging
from typing import Literal
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from infra.settings import settings
from infra.wiring import build_sender, load_signing_identity
from apns_push.domain.entities import (
    DeliveryTarget,
    Environment,
    GatewayRejection,
    NotificationContent,
    NotificationPayload,
)
from apns_push.domain.errors import (
    KeyFormatError,
    KeySourceError,
    PayloadEncodingError,
    SigningError,
    TransportError,
)
from apns_push.domain.services.rejection_interpreter import interpret

logger = logging.getLogger(__name__)

router = APIRouter()

_sender = build_sender(settings)

def _load_identity():
    return load_signing_identity(settings)

class PushRequest(BaseModel):
    device_token: str = Field(..., min_length=1, description="APNs device token")
    topic: str | None = Field(None, description="Bundle id; defaults to APNS_TOPIC")
    environment: Literal["production", "sandbox"] | None = Field(None, description="Defaults to APNS_ENVIRONMENT")
    alert: str
    content_available: Literal[0, 1] = 0
    badge: int | None = Field(None, ge=0)
    sound: str | None = None
    category: str | None = None
    thread_id: str | None = None
    custom_key: str | None = None

    def to_target(self) -> DeliveryTarget:
        topic = self.topic or settings.APNS_TOPIC
        if not topic:
            raise HTTPException(400, "topic is required when APNS_TOPIC is not configured")
        return DeliveryTarget(
            device_token=self.device_token,
            topic=topic,
            environment=Environment.parse(self.environment or settings.APNS_ENVIRONMENT),
        )

    def to_payload(self) -> NotificationPayload:
        return NotificationPayload(
            aps=NotificationContent(
                alert=self.alert,
                content_available=self.content_available,
                badge=self.badge,
                sound=self.sound,
                category=self.category,
                thread_id=self.thread_id,
            ),
            custom_key=self.custom_key,
        )

@router.post("/push")
async def post_push(p: PushRequest):
    target = p.to_target()
    try:
        outcome = await _sender.send(_load_identity(), target, p.to_payload())
    except PayloadEncodingError as e:
        raise HTTPException(400, str(e))
    except (KeySourceError, KeyFormatError, SigningError) as e:
        logger.error("Push signing setup failed: %s", e)
        raise HTTPException(500, str(e))
    except TransportError as e:
        raise HTTPException(502, str(e))

    result = {"ok": outcome.ok, "status_code": outcome.status_code, "apns_id": outcome.apns_id}
    if isinstance(outcome, GatewayRejection):
        result["reason"] = interpret(outcome).reason.value
    return result
