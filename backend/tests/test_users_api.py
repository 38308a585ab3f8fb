import base64

import pytest

from files_manager.main import app
from files_manager.routes.status import get_connections
from files_manager.services.connections import Connections

from conftest import FakeRedis


def basic(email, password):
    return {"Authorization": "Basic " + base64.b64encode(f"{email}:{password}".encode()).decode()}


async def register(client, email="bob@dylan.com", password="toto1234!"):
    return await client.post("/users", json={"email": email, "password": password})


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_user(self, client):
        response = await register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "bob@dylan.com"
        assert "password" not in body

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload, message", [
        ({"password": "x"}, "Missing email"),
        ({"email": "a@b.c"}, "Missing password"),
    ])
    async def test_missing_fields(self, client, payload, message):
        response = await client.post("/users", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": message}

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client):
        await register(client)
        response = await register(client)

        assert response.status_code == 400
        assert response.json() == {"error": "Already exist"}


class TestSessions:
    @pytest.mark.asyncio
    async def test_connect_me_disconnect(self, client):
        user = (await register(client)).json()

        connected = await client.get("/connect", headers=basic("bob@dylan.com", "toto1234!"))
        assert connected.status_code == 200
        token = connected.json()["token"]

        me = await client.get("/users/me", headers={"X-Token": token})
        assert me.json() == user

        assert (await client.get("/disconnect", headers={"X-Token": token})).status_code == 204
        assert (await client.get("/users/me", headers={"X-Token": token})).status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("headers", [
        {},
        {"Authorization": "Bearer abc"},
        {"Authorization": "Basic !!!"},
        basic("bob@dylan.com", "wrong"),
        basic("nobody@dylan.com", "toto1234!"),
    ])
    async def test_connect_rejects_bad_credentials(self, client, headers):
        await register(client)

        response = await client.get("/connect", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_disconnect_requires_session(self, client):
        assert (await client.get("/disconnect", headers={"X-Token": "nope"})).status_code == 401

    @pytest.mark.asyncio
    async def test_uploaded_files_belong_to_connected_user(self, client):
        user = (await register(client)).json()
        token = (await client.get("/connect", headers=basic("bob@dylan.com", "toto1234!"))).json()["token"]

        created = await client.post("/files", json={"name": "docs", "type": "folder"}, headers={"X-Token": token})

        assert created.json()["userId"] == user["id"]


class TestStatus:
    @pytest.mark.asyncio
    async def test_status(self, client, engine):
        app.dependency_overrides[get_connections] = lambda: Connections(engine, FakeRedis())

        response = await client.get("/status")

        assert response.status_code == 200
        assert response.json() == {"redis": True, "db": True}

    @pytest.mark.asyncio
    async def test_stats(self, client, token):
        await register(client)
        await client.post("/files", json={"name": "docs", "type": "folder"}, headers={"X-Token": token})
        await client.post("/files", json={"name": "more", "type": "folder"}, headers={"X-Token": token})

        response = await client.get("/stats")

        assert response.json() == {"users": 1, "files": 2}
