# tests/test_app.py

import pytest
from httpx import ASGITransport, AsyncClient

from app.dependencies import get_admin_user, get_db
from app.main import app

pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.text == "hwplug Backend Running!"


async def test_unhandled_errors_use_error_envelope(db_session, mocker):
    mocker.patch("app.routers.admin.users.crud_user.get_users", side_effect=RuntimeError("database is gone"))

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_admin_user] = lambda: "admin@hwplug.test"
    # Иначе httpx пробросит исключение вместо ответа 500
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/api/admin/users")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "database is gone"}
