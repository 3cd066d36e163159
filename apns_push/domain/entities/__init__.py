from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union


class Environment(Enum):
    PRODUCTION = "production"
    SANDBOX = "sandbox"

    @classmethod
    def parse(cls, value: str) -> "Environment":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown APNs environment: {value!r}") from None


@dataclass(frozen=True)
class SigningIdentity:
    team_id: str
    key_id: str
    private_key: Union[bytes, str] = field(repr=False)


@dataclass(frozen=True)
class TokenClaims:
    iss: str
    iat: int


@dataclass(frozen=True)
class NotificationContent:
    alert: str
    content_available: int = 0
    badge: Optional[int] = None
    sound: Optional[str] = None
    category: Optional[str] = None
    thread_id: Optional[str] = None


@dataclass(frozen=True)
class NotificationPayload:
    aps: NotificationContent
    custom_key: Optional[Union[str, bytes]] = None


@dataclass(frozen=True)
class DeliveryTarget:
    device_token: str
    topic: str
    environment: Environment = Environment.SANDBOX


@dataclass(frozen=True)
class DeliveryOutcome:
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def apns_id(self) -> Optional[str]:
        return self.headers.get("apns-id")


@dataclass(frozen=True)
class GatewayRejection(DeliveryOutcome):
    """Non-2xx answer from the gateway, kept exactly as received."""

    @classmethod
    def from_outcome(cls, outcome: DeliveryOutcome) -> "GatewayRejection":
        return cls(status_code=outcome.status_code, headers=outcome.headers, body=outcome.body)
