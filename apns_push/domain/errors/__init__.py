class PushError(Exception):
    """Base class for every failure raised while preparing or sending a push."""


class KeyFormatError(PushError):
    """Signing key bytes are not a PEM encoded P-256 elliptic-curve private key."""


class SigningError(PushError):
    """The key parsed but the token could not be signed."""


class PayloadEncodingError(PushError):
    """Notification content could not be serialized to UTF-8 JSON."""


class TransportError(PushError):
    """Connection, TLS or HTTP/2 negotiation failure talking to the gateway."""


class KeySourceError(PushError):
    """The configured key source is missing or unreadable."""
