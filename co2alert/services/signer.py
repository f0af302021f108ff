"""
SwitchBot request signing

Every API call carries a fresh signature over token + timestamp + nonce:
HMAC-SHA256 keyed with the secret, base64-encoded, upper-cased.
https://github.com/OpenWonderLabs/SwitchBotAPI#authentication
"""

import base64
import hashlib
import hmac
import time
import uuid
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Credentials:
    """SwitchBot API token and secret."""
    token: str
    secret: str


@dataclass(frozen=True)
class SignedRequest:
    """Per-request authentication values. Never persisted."""
    timestamp: str
    nonce: str
    signature: str


def sign(token: str, secret: str, timestamp: str, nonce: str) -> str:
    """Compute the SwitchBot signature for one request."""
    message = f"{token}{timestamp}{nonce}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii").upper()


def new_signed_request(
    credentials: Credentials,
    clock: Callable[[], float] = time.time,
    nonce_factory: Callable[[], object] = uuid.uuid4,
) -> SignedRequest:
    """Sign a request using the given time and randomness sources."""
    timestamp = str(int(clock() * 1000))
    nonce = str(nonce_factory())
    return SignedRequest(
        timestamp=timestamp,
        nonce=nonce,
        signature=sign(credentials.token, credentials.secret, timestamp, nonce),
    )


def auth_headers(credentials: Credentials, signed: SignedRequest) -> dict[str, str]:
    return {
        "Authorization": credentials.token,
        "sign": signed.signature,
        "t": signed.timestamp,
        "nonce": signed.nonce,
        "Content-Type": "application/json",
    }
