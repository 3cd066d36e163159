import logging
import threading
from typing import Dict, Tuple

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from apns_push.domain.entities import SigningIdentity, TokenClaims
from apns_push.domain.errors import KeyFormatError, SigningError
from apns_push.domain.ports import TokenIssuer

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
# APNs rejects provider tokens older than one hour.
DEFAULT_REFRESH_SECONDS = 50 * 60


def _load_ec_key(pem) -> ec.EllipticCurvePrivateKey:
    data = pem.encode("utf-8") if isinstance(pem, str) else pem
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Signing key is not a valid PEM private key: {e}") from e
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise KeyFormatError("Signing key is not an elliptic-curve key")
    if not isinstance(key.curve, ec.SECP256R1):
        raise KeyFormatError(f"ES256 requires a P-256 key, got {key.curve.name}")
    return key


class JwtTokenIssuer(TokenIssuer):
    def issue(self, identity: SigningIdentity, claims: TokenClaims) -> str:
        key = _load_ec_key(identity.private_key)
        try:
            token = jwt.encode(
                {"iss": claims.iss, "iat": claims.iat},
                key,
                algorithm=ALGORITHM,
                headers={"kid": identity.key_id},
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise SigningError(f"Failed to sign provider token: {e}") from e
        logger.debug("Issued provider token kid=%s iss=%s iat=%s", identity.key_id, claims.iss, claims.iat)
        return token


class CachingTokenIssuer(TokenIssuer):
    """
    Reuses the last token per (team_id, key_id) until it is `refresh_seconds` old.
    Age is measured against the iat of the incoming claims, so the cache follows
    whatever clock the caller uses.
    """

    def __init__(self, inner: TokenIssuer, refresh_seconds: int = DEFAULT_REFRESH_SECONDS):
        self._inner = inner
        self._refresh_seconds = refresh_seconds
        self._lock = threading.Lock()
        self._cache: Dict[Tuple[str, str], Tuple[int, str]] = {}

    def issue(self, identity: SigningIdentity, claims: TokenClaims) -> str:
        cache_key = (identity.team_id, identity.key_id)
        with self._lock:
            cached = self._cache.get(cache_key)
            if cached is not None:
                issued_at, token = cached
                if 0 <= claims.iat - issued_at < self._refresh_seconds:
                    return token
            token = self._inner.issue(identity, claims)
            self._cache[cache_key] = (claims.iat, token)
            logger.info("Refreshed cached provider token kid=%s", identity.key_id)
            return token
