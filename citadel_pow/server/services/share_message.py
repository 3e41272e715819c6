"""
Announcement text and image decoding for POW cards shared to Discord.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Optional

from citadel_pow.core.errors import InvalidRequestError

CATEGORY_NAMES = {
    "pow-writing": "글쓰기",
    "pow-reading": "독서",
    "pow-coding": "코딩",
    "pow-language": "어학",
    "pow-creative": "창작",
    "pow-fitness": "운동",
    "pow-meditation": "명상",
    "pow-music": "음악",
    "pow-art": "미술",
    "pow-other": "기타",
}
DEFAULT_CATEGORY_NAME = "공부"
DEFAULT_USERNAME = "사용자"

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


def category_name(donation_mode: str) -> str:
    return CATEGORY_NAMES.get(donation_mode, DEFAULT_CATEGORY_NAME)


def format_duration(duration_seconds: int) -> str:
    minutes, seconds = divmod(duration_seconds, 60)
    return f"{minutes}분 {seconds}초" if seconds > 0 else f"{minutes}분"


def decode_card_image(photo: str) -> bytes:
    """Decode a base64 image, with or without a ``data:image/...;base64,`` prefix."""
    try:
        return base64.b64decode(_DATA_URL_PREFIX.sub("", photo, count=1), validate=False)
    except (binascii.Error, ValueError) as e:
        raise InvalidRequestError("Invalid image data") from e


def build_share_message(
    *,
    username: Optional[str],
    donation_mode: str,
    duration_seconds: int,
    plan_text: str,
    donation_scope: Optional[str],
    donation_sats: Optional[int],
    total_accumulated_sats: Optional[int],
    current_beca: int,
) -> str:
    """Compose the channel announcement of a finished POW.

    - ``session``: the session's sats were donated right away
    - ``total`` (default): the sats were added to the user's balance
    - anything else: a payout of previously accumulated sats
    """
    name = username or DEFAULT_USERNAME
    scope = donation_scope or "total"
    sats = donation_sats or 0
    category = category_name(donation_mode)

    if scope == "session":
        text = (
            f'**{name}**님께서 "{category}"에서 POW 완료 후, {sats}sats 기부 완료! '
            f"현재 Citadel POW BECA {current_beca + sats}sats!"
        )
    elif scope == "total":
        text = (
            f'**{name}**님께서 "{category}"에서 POW 완료 후, {sats}sats 적립! '
            f"총 적립액 {total_accumulated_sats or 0}sats!"
        )
    else:
        text = f"**{name}**님께서 적립해두셨던 {sats}sats 기부 완료! 현재 Citadel POW BECA {current_beca + sats}sats!"

    return f"{text}\n⏱️ {format_duration(duration_seconds)}\n📝 {plan_text}"
