"""
Meetup QR check-in codes.

A code has the form ``meetup:{meetup_id}:{unix_ts}:{checksum}`` where the
checksum is the first eight hex digits of
``HMAC-SHA256(secret, "{meetup_id}:{unix_ts}")``. A code is valid for
``ttl_seconds`` after ``unix_ts``.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from citadel_pow.core.errors import InvalidRequestError

QR_PREFIX = "meetup"
CHECKSUM_LENGTH = 8


class QRCodeError(InvalidRequestError):
    """Raised when a QR check-in code is rejected."""

    code = "INVALID_QR_CODE"


@dataclass(frozen=True)
class QRCode:
    data: str
    image_url: str
    expires_at: datetime


def _checksum(meetup_id: str, timestamp: int, secret: str) -> str:
    message = f"{meetup_id}:{timestamp}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()[:CHECKSUM_LENGTH]


def generate_qr_code(
    meetup_id: str,
    *,
    secret: str,
    ttl_seconds: int,
    image_service_url: str,
    now: Optional[float] = None,
) -> QRCode:
    timestamp = int(now if now is not None else time.time())
    data = f"{QR_PREFIX}:{meetup_id}:{timestamp}:{_checksum(meetup_id, timestamp, secret)}"
    expires_at = datetime.fromtimestamp(timestamp + ttl_seconds, tz=timezone.utc).replace(tzinfo=None)
    image_url = f"{image_service_url}?size=300x300&data={quote(data, safe='')}"
    return QRCode(data=data, image_url=image_url, expires_at=expires_at)


def verify_qr_code(qr_data: str, *, secret: str, ttl_seconds: int, now: Optional[float] = None) -> str:
    """Validate a scanned code and return the meetup id it was issued for.

    Raises:
        QRCodeError: With ``Invalid QR format``, ``QR code expired`` or ``Invalid QR checksum``.
    """
    parts = qr_data.split(":")
    if len(parts) != 4 or parts[0] != QR_PREFIX:
        raise QRCodeError("Invalid QR format")
    _, meetup_id, timestamp_text, provided = parts
    try:
        timestamp = int(timestamp_text)
    except ValueError as e:
        raise QRCodeError("Invalid QR format") from e

    current = int(now if now is not None else time.time())
    if current - timestamp > ttl_seconds:
        raise QRCodeError("QR code expired")

    if not hmac.compare_digest(_checksum(meetup_id, timestamp, secret), provided):
        raise QRCodeError("Invalid QR checksum")
    return meetup_id
