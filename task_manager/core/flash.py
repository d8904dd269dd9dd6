"""
One-shot flash messages carried in a cookie.

The message is stored as base64url-encoded JSON ``{"type": ..., "message": ...}``
on the response that redirects, and is read and cleared by the next page render.
"""
import base64
import binascii
import json
from typing import Optional, TypedDict

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from starlette.responses import Response

from task_manager.core import get_settings

settings = get_settings()

FLASH_TYPES = ("success", "info", "warning", "danger")


class Flash(TypedDict):
    type: str
    message: str


def encode_flash(flash_type: str, message: str) -> str:
    payload = json.dumps({"type": flash_type, "message": message}, ensure_ascii=False)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_flash(value: str) -> Optional[Flash]:
    """Decode a flash cookie value, returning None for anything malformed"""
    try:
        raw = base64.urlsafe_b64decode(value.encode("ascii"))
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None

    if not isinstance(data, dict):
        return None
    flash_type = data.get("type")
    message = data.get("message")
    if flash_type not in FLASH_TYPES or not isinstance(message, str):
        return None
    return Flash(type=flash_type, message=message)


def set_flash(response: Response, flash_type: str, message: str) -> Response:
    if flash_type not in FLASH_TYPES:
        raise ValueError(f"Unknown flash type: {flash_type}")
    response.set_cookie(
        settings.FLASH_COOKIE_NAME,
        encode_flash(flash_type, message),
        path="/",
        httponly=True,
        samesite="lax",
    )
    return response


def redirect_with_flash(url: str, flash_type: str, message: str) -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    set_flash(response, flash_type, message)
    return response


def has_flash(request: Request) -> bool:
    return settings.FLASH_COOKIE_NAME in request.cookies


def read_flash(request: Request) -> Optional[Flash]:
    value = request.cookies.get(settings.FLASH_COOKIE_NAME)
    if value is None:
        return None
    return decode_flash(value)


def clear_flash(response: Response) -> Response:
    response.delete_cookie(settings.FLASH_COOKIE_NAME, path="/")
    return response
