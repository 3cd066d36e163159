import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from apns_push.domain.entities import GatewayRejection


class RejectionReason(Enum):
    BAD_COLLAPSE_ID = "BadCollapseId"
    BAD_DEVICE_TOKEN = "BadDeviceToken"
    BAD_EXPIRATION_DATE = "BadExpirationDate"
    BAD_MESSAGE_ID = "BadMessageId"
    BAD_PRIORITY = "BadPriority"
    BAD_TOPIC = "BadTopic"
    DEVICE_TOKEN_NOT_FOR_TOPIC = "DeviceTokenNotForTopic"
    DUPLICATE_HEADERS = "DuplicateHeaders"
    IDLE_TIMEOUT = "IdleTimeout"
    INVALID_PUSH_TYPE = "InvalidPushType"
    MISSING_DEVICE_TOKEN = "MissingDeviceToken"
    MISSING_TOPIC = "MissingTopic"
    PAYLOAD_EMPTY = "PayloadEmpty"
    TOPIC_DISALLOWED = "TopicDisallowed"
    BAD_CERTIFICATE = "BadCertificate"
    BAD_CERTIFICATE_ENVIRONMENT = "BadCertificateEnvironment"
    EXPIRED_PROVIDER_TOKEN = "ExpiredProviderToken"
    FORBIDDEN = "Forbidden"
    INVALID_PROVIDER_TOKEN = "InvalidProviderToken"
    MISSING_PROVIDER_TOKEN = "MissingProviderToken"
    BAD_PATH = "BadPath"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    UNREGISTERED = "Unregistered"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    TOO_MANY_PROVIDER_TOKEN_UPDATES = "TooManyProviderTokenUpdates"
    TOO_MANY_REQUESTS = "TooManyRequests"
    INTERNAL_SERVER_ERROR = "InternalServerError"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    SHUTDOWN = "Shutdown"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Rejection:
    status_code: int
    reason: RejectionReason
    timestamp: Optional[int] = None


def interpret(rejection: GatewayRejection) -> Rejection:
    """Reads the `{"reason": ..., "timestamp": ...}` error body APNs sends with non-2xx answers."""
    try:
        data = json.loads(rejection.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        data = None
    if not isinstance(data, dict):
        return Rejection(status_code=rejection.status_code, reason=RejectionReason.UNKNOWN)

    try:
        reason = RejectionReason(data.get("reason"))
    except ValueError:
        reason = RejectionReason.UNKNOWN
    timestamp = data.get("timestamp")
    return Rejection(
        status_code=rejection.status_code,
        reason=reason,
        timestamp=timestamp if isinstance(timestamp, int) else None,
    )
