import pytest
from sqlalchemy import select

from conftest import login
from task_manager.models.user import User
from task_manager.services.security_service import SecurityService
from task_manager.services.task_service import TaskService


def user_form(**overrides):
    data = {
        "data[firstName]": "Ivan",
        "data[lastName]": "Petrov",
        "data[email]": "ivan@example.com",
        "data[password]": "secret",
    }
    data.update(overrides)
    return data


def set_cookies(response):
    return response.headers.get_list("set-cookie")


class TestRegistration:
    """Регистрация пользователей"""

    @pytest.mark.asyncio
    async def test_register_success(self, client, session_factory):
        """Успешная регистрация: редирект на главную и хеш пароля в БД"""
        response = await client.post("/users", data=user_form())

        assert response.status_code == 302
        assert response.headers["location"] == "/"

        async with session_factory() as session:
            user = (await session.execute(select(User))).scalars().one()
        assert user.full_name == "Ivan Petrov"
        assert user.password_digest != "secret"
        assert SecurityService.verify_password("secret", user.password_digest)

    @pytest.mark.asyncio
    async def test_register_validation_errors(self, client):
        """Пустые поля и короткий пароль: форма с ошибками и 422"""
        response = await client.post(
            "/users", data=user_form(**{"data[firstName]": "", "data[password]": "1"})
        )

        assert response.status_code == 422
        assert "can&#39;t be blank" in response.text
        assert "must be at least 3 characters" in response.text

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client, user):
        """Email уже занят"""
        response = await client.post("/users", data=user_form(**{"data[email]": user.email}))

        assert response.status_code == 422
        assert "Email already in use" in response.text

    @pytest.mark.asyncio
    async def test_users_list_is_public(self, client, user):
        response = await client.get("/users")

        assert response.status_code == 200
        assert "Anna Smith" in response.text


class TestSession:
    """Вход и выход"""

    @pytest.mark.asyncio
    async def test_login_success(self, client, user):
        response = await client.post(
            "/session", data={"data[email]": "anna@example.com", "data[password]": "secret"}
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        session_cookie = [c for c in set_cookies(response) if c.startswith("session=")]
        assert session_cookie and "HttpOnly" in session_cookie[0]

    @pytest.mark.asyncio
    async def test_login_email_with_spaces(self, client, user):
        """Email из формы входа очищается от пробелов, как при регистрации"""
        response = await client.post(
            "/session", data={"data[email]": "  anna@example.com ", "data[password]": "secret"}
        )

        assert response.status_code == 302
        assert any(c.startswith("session=") for c in set_cookies(response))

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, user):
        response = await client.post(
            "/session", data={"data[email]": "anna@example.com", "data[password]": "wrong"}
        )

        assert response.status_code == 422
        assert "Invalid email or password" in response.text

    @pytest.mark.asyncio
    async def test_session_root_redirects(self, client):
        response = await client.get("/session")

        assert response.status_code == 302
        assert response.headers["location"] == "/session/new"

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client, user):
        login(client, user.id)

        response = await client.post("/session/delete")

        assert response.status_code == 302
        cleared = [c for c in set_cookies(response) if c.startswith("session=")]
        assert cleared and "Max-Age=0" in cleared[0]

    @pytest.mark.asyncio
    async def test_current_user_in_layout(self, client, user):
        login(client, user.id)

        response = await client.get("/")

        assert response.status_code == 200
        assert "Anna Smith" in response.text
        assert "Log out" in response.text

    @pytest.mark.asyncio
    async def test_tampered_cookie_is_anonymous(self, client, user):
        client.cookies.set("session", "not-a-token")

        response = await client.get("/")

        assert response.status_code == 200
        assert "Log in" in response.text


class TestUserManagement:
    """Редактирование и удаление только своего аккаунта"""

    @pytest.mark.asyncio
    async def test_edit_other_user_refused(self, client, user, other_user):
        login(client, user.id)

        response = await client.get(f"/users/{other_user.id}/edit")

        assert response.status_code == 302
        assert response.headers["location"] == "/users"

    @pytest.mark.asyncio
    async def test_edit_missing_user(self, client, user):
        login(client, user.id)

        response = await client.get("/users/999/edit")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_self_keeps_blank_fields(self, client, user, session_factory):
        """Пустые поля при редактировании оставляют прежние значения"""
        login(client, user.id)

        response = await client.post(
            f"/users/{user.id}",
            data=user_form(**{"data[firstName]": "Annie", "data[lastName]": "", "data[email]": "", "data[password]": ""}),
        )

        assert response.status_code == 302
        async with session_factory() as session:
            updated = await session.get(User, user.id)
        assert updated.first_name == "Annie"
        assert updated.last_name == "Smith"
        assert updated.email == "anna@example.com"
        assert SecurityService.verify_password("secret", updated.password_digest)

    @pytest.mark.asyncio
    async def test_delete_self(self, client, user, session_factory):
        login(client, user.id)

        response = await client.post(f"/users/{user.id}/delete")

        assert response.status_code == 302
        assert any(c.startswith("session=") for c in set_cookies(response))
        async with session_factory() as session:
            assert await session.get(User, user.id) is None

    @pytest.mark.asyncio
    async def test_delete_user_with_tasks_refused(self, client, db_session, user, task_status, session_factory):
        await TaskService.create(db_session, name="t", status_id=task_status.id, creator_id=user.id)
        login(client, user.id)

        response = await client.post(f"/users/{user.id}/delete")

        assert response.status_code == 302
        assert response.headers["location"] == "/users"
        async with session_factory() as session:
            assert await session.get(User, user.id) is not None

    @pytest.mark.asyncio
    async def test_delete_other_user_refused(self, client, user, other_user, session_factory):
        login(client, user.id)

        response = await client.delete(f"/users/{other_user.id}")

        assert response.status_code == 302
        async with session_factory() as session:
            assert await session.get(User, other_user.id) is not None
