import logging
import threading
import time
from typing import Callable, Dict, Optional

from apns_push.domain.entities import (
    DeliveryOutcome,
    DeliveryTarget,
    Environment,
    GatewayRejection,
    NotificationPayload,
    SigningIdentity,
    TokenClaims,
)
from apns_push.domain.ports import PayloadCodec, PushTransport, TokenIssuer

logger = logging.getLogger(__name__)

GATEWAY_HOSTS: Dict[Environment, str] = {
    Environment.PRODUCTION: "api.push.apple.com",
    Environment.SANDBOX: "api.sandbox.push.apple.com",
}


def resolve_endpoint(target: DeliveryTarget) -> str:
    host = GATEWAY_HOSTS[target.environment]
    return f"https://{host}/3/device/{target.device_token}"


def build_headers(topic: str, token: str) -> Dict[str, str]:
    return {
        "apns-topic": topic,
        "authorization": f"bearer {token}",
        "content-type": "application/json",
    }


class NotificationSender:
    def __init__(
        self,
        issuer: TokenIssuer,
        codec: PayloadCodec,
        transport: PushTransport,
        clock: Callable[[], float] = time.time,
    ):
        self._issuer = issuer
        self._codec = codec
        self._transport = transport
        self._clock = clock
        self._lock = threading.Lock()
        self._last_iat = 0

    def claims_for(self, identity: SigningIdentity) -> TokenClaims:
        """Fresh claims; iat never moves backwards even if the wall clock does."""
        now = int(self._clock())
        with self._lock:
            self._last_iat = max(self._last_iat, now)
            return TokenClaims(iss=identity.team_id, iat=self._last_iat)

    async def send(
        self,
        identity: SigningIdentity,
        target: DeliveryTarget,
        payload: NotificationPayload,
        claims: Optional[TokenClaims] = None,
    ) -> DeliveryOutcome:
        url = resolve_endpoint(target)
        token = self._issuer.issue(identity, claims or self.claims_for(identity))
        body = self._codec.encode(payload)
        headers = build_headers(target.topic, token)

        logger.info("Sending push to %s (topic=%s, %d bytes)", target.environment.value, target.topic, len(body))
        outcome = await self._transport.post(url, headers, body)
        if not outcome.ok:
            logger.warning("Gateway rejected push with status %s", outcome.status_code)
            return GatewayRejection.from_outcome(outcome)
        return outcome
