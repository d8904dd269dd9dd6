import base64
import json

import pytest
from starlette.responses import Response

from task_manager.core.flash import decode_flash, encode_flash, redirect_with_flash, set_flash


class TestFlashCookie:
    """Кодирование flash-сообщений в cookie"""

    def test_encode_decode(self):
        value = encode_flash("success", "Задача создана")
        assert decode_flash(value) == {"type": "success", "message": "Задача создана"}

    @pytest.mark.parametrize("value", ["", "not base64!", encode_flash("success", "x")[:-4] + "@@@@"])
    def test_malformed_value_ignored(self, value):
        assert decode_flash(value) is None

    def test_unknown_type_ignored_on_decode(self):
        raw = base64.urlsafe_b64encode(json.dumps({"type": "evil", "message": "x"}).encode()).decode()
        assert decode_flash(raw) is None

    def test_set_flash_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            set_flash(Response(), "evil", "message")

    def test_redirect_with_flash(self):
        response = redirect_with_flash("/tasks", "danger", "Nope")

        assert response.status_code == 302
        assert response.headers["location"] == "/tasks"
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("flash=")
        assert "HttpOnly" in cookie


class TestFlashLifecycle:
    """Сообщение показывается один раз и затем удаляется"""

    @pytest.mark.asyncio
    async def test_flash_shown_once_and_cleared(self, client):
        client.cookies.set("flash", encode_flash("info", "Hello there"))

        response = await client.get("/statuses")

        assert response.status_code == 200
        assert "Hello there" in response.text
        cleared = [c for c in response.headers.get_list("set-cookie") if c.startswith("flash=")]
        assert cleared and "Max-Age=0" in cleared[0]

    @pytest.mark.asyncio
    async def test_no_flash_no_cookie_changes(self, client):
        response = await client.get("/statuses")

        assert response.status_code == 200
        assert "set-cookie" not in response.headers
