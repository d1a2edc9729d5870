"""JWT access token validation (ES256).

courseflow does not run a login flow; tokens are issued by the
platform's identity service and verified here against the public key in
``JWT_PUBLIC_KEY``.  Without one (dev and test only) an ephemeral key
pair is generated on import and ``create_access_token`` mints tokens
against it for tests and scripts/demo_progress.py.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from courseflow.core.config import SETTINGS, Settings


def load_keys(
    settings: Settings,
) -> tuple[ec.EllipticCurvePrivateKey | None, ec.EllipticCurvePublicKey]:
    """Return (signing key, verification key) for *settings*.

    The signing key is None when a public key is configured.
    """
    if settings.jwt_public_key:
        public_key = serialization.load_pem_public_key(settings.jwt_public_key.encode())
        return None, public_key  # type: ignore[return-value]
    private_key = ec.generate_private_key(ec.SECP256R1())
    return private_key, private_key.public_key()


_private_key, _public_key = load_keys(SETTINGS)

ALGORITHM = "ES256"
ISSUER = "courseflow"
AUDIENCE = "courseflow"
ACCESS_TOKEN_TTL_MIN = 15


def create_access_token(*, sub: str, roles: list[str] | None = None) -> str:
    """Build and sign an access token with sub, iss, aud, exp, iat, jti, roles.

    Only available with the ephemeral dev/test key pair.
    """
    if _private_key is None:
        raise RuntimeError("JWT_PUBLIC_KEY is set; tokens come from the identity service")
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["student"],
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256.  Raises jwt.ExpiredSignatureError or
    jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
