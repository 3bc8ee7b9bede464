"""Room identifiers and participant links"""
import random
import string
from urllib.parse import quote, urlsplit, urlunsplit

from workshop_timer import config

_ROOM_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_room_id(length: int = config.ROOM_ID_LENGTH) -> str:
    """
    Short opaque room token.

    Not cryptographically secure and not checked for uniqueness; anyone holding
    the token can control the room.
    """
    return "".join(random.choices(_ROOM_ID_ALPHABET, k=length))


def participant_url(base_url: str, room_id: str) -> str:
    """Origin + path of base_url with the room query parameter"""
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, f"room={quote(room_id, safe='')}", ""))


def qr_image_url(url: str, size: int = config.QR_DEFAULT_SIZE) -> str:
    """Image URL from the external QR service encoding url"""
    data = quote(url, safe="!*'()")
    return f"{config.QR_SERVICE_URL}?size={size}x{size}&data={data}"
