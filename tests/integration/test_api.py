"""Integration tests for the FastAPI layer."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from trailwarden.api.app import create_app
from trailwarden.api.runtime import ApiState
from trailwarden.config import Settings
from trailwarden.domain.enums import Terrain
from trailwarden.repository import JsonSnapshotStore


def _make_app(tmp_path, rng):
    def factory() -> ApiState:
        settings = Settings(data_dir=tmp_path, log_limit=50)
        return ApiState(settings=settings, rng=rng)

    app = create_app(state_factory=factory)
    transport = ASGITransport(app=app)
    return app, transport


@pytest.mark.asyncio
async def test_day_encounter_resolution_via_api(tmp_path, scripted_rng):
    app, transport = _make_app(tmp_path, scripted_rng)
    scripted_rng.queue(2)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

        response = await client.get("/session")
        assert response.status_code == 200
        overview = response.json()
        assert overview["result"] == "No rolls yet."
        assert overview["active"] is None
        assert overview["supplies"]["needs"] == {"food": 1.0, "feed": 1.0, "water": 5.0}

        response = await client.post("/rolls/travel")
        assert response.status_code == 200
        rolled = response.json()
        assert rolled["kind"] == "hostile"
        assert rolled["active"]["kind"] == "encounter resolution"
        assert rolled["active"]["step"] == "enemy_stealth_choice"

        response = await client.post("/rolls/rest")
        assert response.status_code == 409

        response = await client.post("/flow/choose", json={"attempt": False})
        assert response.json()["active"]["step"] == "pp_contest"

        response = await client.post("/flow/contest", json={"player_pp": 0, "enemy_pp": 10})
        assert response.status_code == 422

        response = await client.post("/flow/contest", json={"player_pp": 15, "enemy_pp": 10})
        assert response.status_code == 200
        contest = response.json()
        assert contest["active"]["winner"] == "players"
        assert contest["result"] == "Players win (15 > 10) -> the party may sneak"

        response = await client.post("/flow/confirm")
        assert response.status_code == 409

        await client.post("/flow/choose", json={"attempt": True})
        response = await client.post("/flow/rolls", json={"text": "12, 14"})
        detection = response.json()["active"]
        assert detection["step"] == "detection"
        assert detection["detection_threshold"] == 13
        assert detection["default_detection_pp"] == 10

        response = await client.post("/flow/detection", json={})
        assert response.status_code == 200
        final = response.json()
        assert final["outcome"] == "encounter_avoided"
        assert final["terminal"] is True
        assert final["active"] is None

        response = await client.get("/session/log")
        log = response.json()["log"]
        assert log[0].endswith("Encounter avoided -> party sneaked successfully")

        response = await client.delete("/session/log")
        assert response.json()["result"] == "Log cleared."


@pytest.mark.asyncio
async def test_rationing_and_foraging_via_api(tmp_path, scripted_rng):
    app, transport = _make_app(tmp_path, scripted_rng)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.patch("/settings", json={"watch_count": 5, "terrain": "enemy"})
        assert response.status_code == 200
        assert len(response.json()["watches"]) == 5

        response = await client.put("/weather", json={"hot": True})
        assert response.json()["needs"]["water"] == 10.0

        response = await client.get("/rationing")
        assert response.status_code == 409

        response = await client.post("/rationing")
        assert response.status_code == 200
        assert response.json()["can_commit"] is True

        response = await client.post(
            "/rationing/toggle", json={"creature_id": "2", "need": "water"}
        )
        dialog = response.json()
        assert dialog["selections"]["2"] == {"food": True, "water": False}
        assert dialog["warnings"][0]["will_dehydrate"] is True

        response = await client.post("/foraging")
        assert response.status_code == 409

        response = await client.post("/rationing/commit")
        assert response.status_code == 200
        committed = response.json()
        assert committed["notice"] == "Day closed: 2/2 supplied."
        assert committed["creatures"][1]["exhaustion"] == 1
        assert committed["storages"][1]["water"] == 12.0

        response = await client.post("/rationing/undo")
        assert response.json()["undone"] is True
        assert response.json()["storages"][1]["water"] == 20.0

        response = await client.post("/foraging")
        assert response.status_code == 200
        assert response.json()["step"] == "config"

        response = await client.post("/foraging/config", json={"dc": 12})
        assert response.status_code == 422

        response = await client.post("/foraging/config", json={"dc": 15, "modifier": 2})
        assert response.json()["step"] == "input"

        scripted_rng.queue(3, 6)
        response = await client.post("/foraging/check", json={"check": 20})
        checked = response.json()
        assert (checked["food"], checked["water"], checked["mishap"]) == (5, 8, False)
        assert checked["active"]["step"] == "result"

        response = await client.post("/foraging/deposit", json={"resource": "food_feed"})
        assert response.json()["deposited"] == 5

        response = await client.post("/foraging/close")
        assert response.status_code == 409

        response = await client.post("/foraging/discard")
        assert response.status_code == 200
        assert response.json()["active"] is None

        await client.patch("/settings", json={"pace": "fast"})
        response = await client.post("/foraging")
        assert response.status_code == 409

    store = JsonSnapshotStore(tmp_path)
    assert store.load_settings().terrain == Terrain.ENEMY
    assert store.load_storages()[0].food == 55


@pytest.mark.asyncio
async def test_party_and_matrix_editing_via_api(tmp_path, scripted_rng):
    app, transport = _make_app(tmp_path, scripted_rng)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.post(
            "/creatures", json={"name": "Mule", "size": "Large", "uses_feed": True}
        )
        assert response.status_code == 201
        mule_id = response.json()["id"]

        response = await client.get("/creatures")
        listed = {creature["id"]: creature for creature in response.json()}
        assert listed[mule_id]["requirement"] == {"food": 0.0, "feed": 1.0, "water": 4.0}

        response = await client.patch(f"/creatures/{mule_id}", json={"exhaustion": 9})
        assert response.status_code == 422

        response = await client.delete(f"/creatures/{mule_id}")
        assert response.status_code == 204
        response = await client.delete(f"/creatures/{mule_id}")
        assert response.status_code == 404

        response = await client.post(
            "/storages", json={"name": "Skin", "storage_type": "water", "water": 5}
        )
        assert response.status_code == 201
        assert response.json()["storage_type"] == "water"

        response = await client.post("/storages", json={"storage_type": "water", "food": 5})
        assert response.status_code == 422

        response = await client.put("/matrix/day/road/hostile/1", json={"value": 5})
        assert response.status_code == 200
        edited = response.json()
        assert edited["adjusted"] is True
        assert edited["ranges"]["neutral"] == [6, 8]

        response = await client.put("/matrix/day/road/hostile/2", json={"value": 5})
        assert response.status_code == 422
        response = await client.put("/matrix/day/road/hostile/1", json={"value": -1})
        assert response.status_code == 422

        response = await client.put("/matrix/night/wanted/light", json={"value": 5})
        assert response.json()["light"] == 5
        response = await client.delete("/matrix/night/wanted/light")
        assert response.json() == {"basis": [1, 10], "light": 2}

        response = await client.get("/session/log")
        assert response.json()["log"][0].endswith(
            "Matrix: ranges for 'Road' adjusted automatically."
        )

        response = await client.post("/matrix/reset")
        assert response.json()["day"]["road"]["hostile"] == [1, 3]

    stored = JsonSnapshotStore(tmp_path).load_storages()
    assert [storage.name for storage in stored] == ["Wagon (food)", "Water barrel", "Skin"]
