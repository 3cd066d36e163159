from abc import ABC, abstractmethod
from typing import Mapping
from apns_push.domain.entities import SigningIdentity, TokenClaims, NotificationPayload, DeliveryOutcome

class TokenIssuer(ABC):
    @abstractmethod
    def issue(self, identity: SigningIdentity, claims: TokenClaims) -> str:
        ...

class PayloadCodec(ABC):
    @abstractmethod
    def encode(self, payload: NotificationPayload) -> bytes:
        ...

class PushTransport(ABC):
    @abstractmethod
    async def post(self, url: str, headers: Mapping[str, str], body: bytes) -> DeliveryOutcome:
        ...

class KeySource(ABC):
    @abstractmethod
    def load(self) -> bytes:
        ...
