from apns_push.adapters.driven.key_source import EnvKeySource, FileKeySource
from apns_push.adapters.driven.payload_codec_json import JsonPayloadCodec
from apns_push.adapters.driven.push_transport_httpx import HttpxPushTransport
from apns_push.adapters.driven.token_issuer_jwt import CachingTokenIssuer, JwtTokenIssuer
from apns_push.domain.entities import SigningIdentity
from apns_push.domain.errors import KeySourceError
from apns_push.domain.ports import KeySource, PushTransport, TokenIssuer
from apns_push.domain.services.notification_sender import NotificationSender


def build_issuer(settings) -> TokenIssuer:
    issuer = JwtTokenIssuer()
    if settings.APNS_TOKEN_CACHE:
        return CachingTokenIssuer(issuer, refresh_seconds=settings.APNS_TOKEN_REFRESH_SECONDS)
    return issuer


def build_transport(settings) -> HttpxPushTransport:
    return HttpxPushTransport(timeout=settings.APNS_TIMEOUT)


def build_sender(settings, transport: PushTransport | None = None) -> NotificationSender:
    return NotificationSender(
        issuer=build_issuer(settings),
        codec=JsonPayloadCodec(),
        transport=transport or build_transport(settings),
    )


def build_key_source(settings) -> KeySource:
    if settings.APNS_AUTH_KEY_PATH:
        return FileKeySource(settings.APNS_AUTH_KEY_PATH)
    if settings.APNS_AUTH_KEY_ENV:
        return EnvKeySource(settings.APNS_AUTH_KEY_ENV)
    raise KeySourceError("Neither APNS_AUTH_KEY_PATH nor APNS_AUTH_KEY_ENV is configured")


def load_signing_identity(settings) -> SigningIdentity:
    key = build_key_source(settings).load()
    return SigningIdentity(team_id=settings.APNS_TEAM_ID, key_id=settings.APNS_KEY_ID, private_key=key)
