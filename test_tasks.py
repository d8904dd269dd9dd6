import pytest
from sqlalchemy import select

from conftest import login
from task_manager.models.label import Label
from task_manager.models.status import Status
from task_manager.models.task import Task
from task_manager.services.label_service import LabelService
from task_manager.services.task_service import TaskService


def task_form(status_id, **overrides):
    data = {
        "data[name]": "Write docs",
        "data[description]": "README",
        "data[statusId]": str(status_id),
        "data[executorId]": "",
    }
    data.update(overrides)
    return data


class TestAccess:
    """Страницы изменения данных требуют входа"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["/statuses/new", "/labels/new", "/tasks/new"])
    async def test_anonymous_redirected_to_login(self, client, url):
        response = await client.get(url)

        assert response.status_code == 302
        assert response.headers["location"] == "/session/new"
        assert any(c.startswith("flash=") for c in response.headers.get_list("set-cookie"))

    @pytest.mark.asyncio
    async def test_anonymous_post_refused(self, client, session_factory):
        response = await client.post("/statuses", data={"data[name]": "new"})

        assert response.status_code == 302
        async with session_factory() as session:
            assert (await session.execute(select(Status))).scalars().all() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["/statuses", "/labels", "/tasks"])
    async def test_lists_are_public(self, client, url):
        response = await client.get(url)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_page_renders_404(self, client):
        response = await client.get("/no-such-page")

        assert response.status_code == 404
        assert "<h1>404</h1>" in response.text


class TestStatusesAndLabels:
    """CRUD статусов и меток"""

    @pytest.mark.asyncio
    async def test_create_status(self, client, user, session_factory):
        login(client, user.id)

        response = await client.post("/statuses", data={"data[name]": "  in progress "})

        assert response.status_code == 302
        assert response.headers["location"] == "/statuses"
        async with session_factory() as session:
            names = (await session.execute(select(Status.name))).scalars().all()
        assert names == ["in progress"]

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, client, user):
        login(client, user.id)

        response = await client.post("/labels", data={"data[name]": "   "})

        assert response.status_code == 422
        assert "can&#39;t be blank" in response.text

    @pytest.mark.asyncio
    async def test_rename_label(self, client, user, label, session_factory):
        login(client, user.id)

        response = await client.post(f"/labels/{label.id}", data={"data[name]": "defect"})

        assert response.status_code == 302
        async with session_factory() as session:
            assert (await session.get(Label, label.id)).name == "defect"

    @pytest.mark.asyncio
    async def test_edit_missing_status(self, client, user):
        login(client, user.id)

        response = await client.get("/statuses/999/edit")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_status_in_use_refused(self, client, db_session, user, task_status, session_factory):
        await TaskService.create(db_session, name="t", status_id=task_status.id, creator_id=user.id)
        login(client, user.id)

        response = await client.post(f"/statuses/{task_status.id}/delete")

        assert response.status_code == 302
        async with session_factory() as session:
            assert await session.get(Status, task_status.id) is not None

    @pytest.mark.asyncio
    async def test_delete_unused_label(self, client, user, label, session_factory):
        login(client, user.id)

        response = await client.delete(f"/labels/{label.id}")

        assert response.status_code == 302
        async with session_factory() as session:
            assert await session.get(Label, label.id) is None


class TestTasks:
    """Создание, изменение и удаление задач через формы"""

    @pytest.mark.asyncio
    async def test_create_task(self, client, user, other_user, task_status, label, session_factory):
        """Автор - текущий пользователь, метки сохраняются"""
        login(client, user.id)

        response = await client.post(
            "/tasks",
            data=task_form(task_status.id, **{
                "data[executorId]": str(other_user.id),
                "data[labels]": [str(label.id)],
            }),
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/tasks"
        async with session_factory() as session:
            task = (await TaskService.get_all(session))[0]
        assert task.name == "Write docs"
        assert task.creator_id == user.id
        assert task.executor_id == other_user.id
        assert task.label_ids == [label.id]

    @pytest.mark.asyncio
    async def test_create_task_requires_existing_status(self, client, user, session_factory):
        login(client, user.id)

        response = await client.post("/tasks", data=task_form(999))

        assert response.status_code == 422
        assert "must be selected" in response.text
        async with session_factory() as session:
            assert (await session.execute(select(Task))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_create_task_unknown_label(self, client, user, task_status):
        login(client, user.id)

        response = await client.post("/tasks", data=task_form(task_status.id, **{"data[labels]": ["999"]}))

        assert response.status_code == 422
        assert "unknown label" in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field, value, message", [
        ("data[statusId]", "99999999999999999999", "must be selected"),
        ("data[executorId]", "99999999999999999999", "unknown user"),
        ("data[labels]", ["99999999999999999999"], "unknown label"),
    ])
    async def test_create_task_oversized_ids_rejected(
        self, client, user, task_status, session_factory, field, value, message
    ):
        """id больше BIGINT - ошибка формы, а не 500"""
        login(client, user.id)

        response = await client.post("/tasks", data=task_form(task_status.id, **{field: value}))

        assert response.status_code == 422
        assert message in response.text
        async with session_factory() as session:
            assert (await session.execute(select(Task))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_create_task_duplicate_label_spellings(self, client, user, task_status, label, session_factory):
        """"1" и "01" - одна и та же метка"""
        label_id = label.id
        login(client, user.id)

        response = await client.post(
            "/tasks",
            data=task_form(task_status.id, **{"data[labels]": [str(label_id), f"0{label_id}"]}),
        )

        assert response.status_code == 302
        async with session_factory() as session:
            task = (await TaskService.get_all(session))[0]
        assert task.label_ids == [label_id]

    @pytest.mark.asyncio
    async def test_update_task_replaces_labels(self, client, db_session, user, task_status, label, session_factory):
        other_label = await LabelService.create(db_session, name="feature")
        task = await TaskService.create(
            db_session, name="t", status_id=task_status.id, creator_id=user.id, label_ids=[label.id]
        )
        login(client, user.id)

        response = await client.post(
            f"/tasks/{task.id}",
            data=task_form(task_status.id, **{"data[name]": "renamed", "data[labels][]": [str(other_label.id)]}),
        )

        assert response.status_code == 302
        async with session_factory() as session:
            updated = await TaskService.get_by_id(session, task.id)
        assert updated.name == "renamed"
        assert updated.label_ids == [other_label.id]

    @pytest.mark.asyncio
    async def test_update_without_labels_clears_them(self, client, db_session, user, task_status, label, session_factory):
        task = await TaskService.create(
            db_session, name="t", status_id=task_status.id, creator_id=user.id, label_ids=[label.id]
        )
        login(client, user.id)

        response = await client.patch(f"/tasks/{task.id}", data=task_form(task_status.id))

        assert response.status_code == 302
        async with session_factory() as session:
            updated = await TaskService.get_by_id(session, task.id)
        assert updated.label_ids == []

    @pytest.mark.asyncio
    async def test_show_task(self, client, db_session, user, task_status, label):
        task = await TaskService.create(
            db_session, name="Deploy", status_id=task_status.id, creator_id=user.id, label_ids=[label.id]
        )

        response = await client.get(f"/tasks/{task.id}")

        assert response.status_code == 200
        assert "Deploy" in response.text
        assert "bug" in response.text

    @pytest.mark.asyncio
    async def test_show_missing_task(self, client):
        response = await client.get("/tasks/999")
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["/tasks/99999999999999999999", "/statuses/0/edit", "/labels/99999999999999999999/edit"])
    async def test_out_of_range_path_id(self, client, user, url):
        login(client, user.id)

        response = await client.get(url)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_only_creator_deletes(self, client, db_session, user, other_user, task_status, session_factory):
        task = await TaskService.create(db_session, name="t", status_id=task_status.id, creator_id=user.id)
        login(client, other_user.id)

        response = await client.post(f"/tasks/{task.id}/delete")

        assert response.status_code == 302
        async with session_factory() as session:
            assert await session.get(Task, task.id) is not None

        login(client, user.id)
        response = await client.post(f"/tasks/{task.id}/delete")

        assert response.status_code == 302
        async with session_factory() as session:
            assert await session.get(Task, task.id) is None


class TestTaskListFilters:
    """Фильтры списка задач из query string"""

    @pytest.mark.asyncio
    async def test_filter_by_label_and_only_my(self, client, db_session, user, other_user, task_status, label):
        await TaskService.create(
            db_session, name="mine-labelled", status_id=task_status.id, creator_id=user.id, label_ids=[label.id]
        )
        await TaskService.create(db_session, name="mine-plain", status_id=task_status.id, creator_id=user.id)
        await TaskService.create(
            db_session, name="theirs-labelled", status_id=task_status.id, creator_id=other_user.id,
            label_ids=[label.id],
        )
        login(client, user.id)

        response = await client.get("/tasks", params={"labelId": label.id, "onlyMy": "on"})

        assert response.status_code == 200
        assert "mine-labelled" in response.text
        assert "mine-plain" not in response.text
        assert "theirs-labelled" not in response.text

    @pytest.mark.asyncio
    async def test_only_my_ignored_for_anonymous(self, client, db_session, user, task_status):
        await TaskService.create(db_session, name="someone", status_id=task_status.id, creator_id=user.id)

        response = await client.get("/tasks", params={"onlyMy": "1"})

        assert response.status_code == 200
        assert "someone" in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [
        {"statusId": "abc", "hasLabel": "nope"},
        {"statusId": "99999999999999999999"},
        {"executorId": "99999999999999999999"},
        {"labelId": "99999999999999999999"},
        {"labelId": "²"},
        {"statusId": "٣"},
    ])
    async def test_malformed_filter_ignored(self, client, db_session, user, task_status, params):
        """Нечисловые, нецифровые ASCII и слишком большие id не фильтруют"""
        await TaskService.create(db_session, name="visible", status_id=task_status.id, creator_id=user.id)

        response = await client.get("/tasks", params=params)

        assert response.status_code == 200
        assert "visible" in response.text
