import json
from typing import Any, Dict

from apns_push.domain.entities import NotificationPayload
from apns_push.domain.errors import PayloadEncodingError
from apns_push.domain.ports import PayloadCodec

CUSTOM_DATA_KEY = "custom_key"

# NotificationContent attribute -> APNs wire name, in wire order.
_OPTIONAL_APS_FIELDS = (
    ("badge", "badge"),
    ("sound", "sound"),
    ("category", "category"),
    ("thread_id", "thread-id"),
)


def _content_available(value: Any) -> int:
    if value in (0, 1) and isinstance(value, (bool, int)):
        return int(value)
    raise PayloadEncodingError(f"content-available must be 0 or 1, got {value!r}")


def _custom_data(value: Any) -> str:
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise PayloadEncodingError(f"Custom data is not valid UTF-8: {e}") from e
    return value


class JsonPayloadCodec(PayloadCodec):
    def to_dict(self, payload: NotificationPayload) -> Dict[str, Any]:
        content = payload.aps
        aps: Dict[str, Any] = {
            "alert": content.alert,
            "content-available": _content_available(content.content_available),
        }
        for attr, wire_name in _OPTIONAL_APS_FIELDS:
            value = getattr(content, attr)
            if value is not None:
                aps[wire_name] = value

        doc: Dict[str, Any] = {"aps": aps}
        if payload.custom_key is not None:
            doc[CUSTOM_DATA_KEY] = _custom_data(payload.custom_key)
        return doc

    def encode(self, payload: NotificationPayload) -> bytes:
        doc = self.to_dict(payload)
        try:
            return json.dumps(doc, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            # UnicodeEncodeError is a ValueError: lone surrogates in a str field.
            raise PayloadEncodingError(f"Payload is not JSON serializable: {e}") from e
