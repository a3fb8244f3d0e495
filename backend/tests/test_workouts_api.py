import pytest

pytestmark = pytest.mark.asyncio


async def create_workout(client, user, **overrides):
    payload = {"title": "Bench press", "reps": 10, "load": 60.5}
    payload.update(overrides)
    return await client.post("/api/workouts", json=payload, headers=user["headers"])


async def test_create_and_get_workout(client, alice):
    created = await create_workout(client, alice)

    assert created.status_code == 201, created.text
    workout = created.json()
    assert workout["user_id"] == alice["id"]
    assert workout["load"] == 60.5

    fetched = await client.get(f"/api/workouts/{workout['id']}", headers=alice["headers"])
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Bench press"


@pytest.mark.parametrize("payload", [{"reps": -1}, {"load": -5}, {"title": ""}])
async def test_invalid_workout(client, alice, payload):
    response = await create_workout(client, alice, **payload)

    assert response.status_code == 400


async def test_blank_title_rejected(client, alice):
    response = await create_workout(client, alice, title="   ")

    assert response.status_code == 400


async def test_list_workouts(client, alice, bob):
    await create_workout(client, alice, title="Squat")
    await create_workout(client, alice, title="Deadlift")
    await create_workout(client, bob, title="Row")

    everyone = await client.get("/api/workouts/all", headers=alice["headers"])
    mine = await client.get("/api/workouts", headers=alice["headers"])

    assert everyone.json()["total"] == 3
    assert [w["title"] for w in mine.json()["workouts"]] == ["Deadlift", "Squat"]


async def test_update_workout(client, alice, bob):
    workout = (await create_workout(client, alice)).json()

    forbidden = await client.patch(f"/api/workouts/{workout['id']}", json={"reps": 12}, headers=bob["headers"])
    updated = await client.patch(f"/api/workouts/{workout['id']}", json={"reps": 12}, headers=alice["headers"])
    unknown_field = await client.patch(f"/api/workouts/{workout['id']}", json={"user_id": bob["id"]}, headers=alice["headers"])

    assert forbidden.status_code == 403
    assert updated.status_code == 200
    assert updated.json()["reps"] == 12
    assert updated.json()["title"] == "Bench press"
    assert unknown_field.status_code == 400


@pytest.mark.parametrize("payload", [{"user_id": 99}, {"reps": "many"}, {"title": None, "extra": 1}])
async def test_non_owner_patch_is_forbidden_for_any_body(client, alice, bob, payload):
    workout = (await create_workout(client, alice)).json()

    response = await client.patch(f"/api/workouts/{workout['id']}", json=payload, headers=bob["headers"])

    assert response.status_code == 403
    assert (await client.get(f"/api/workouts/{workout['id']}", headers=alice["headers"])).json()["reps"] == 10


async def test_delete_workout(client, alice, bob):
    workout = (await create_workout(client, alice)).json()

    forbidden = await client.delete(f"/api/workouts/{workout['id']}", headers=bob["headers"])
    deleted = await client.delete(f"/api/workouts/{workout['id']}", headers=alice["headers"])
    missing = await client.get(f"/api/workouts/{workout['id']}", headers=alice["headers"])

    assert forbidden.status_code == 403
    assert deleted.status_code == 200
    assert deleted.json()["id"] == workout["id"]
    assert missing.status_code == 404
    assert missing.json()["detail"] == "No such workout"


async def test_workouts_require_auth(client):
    assert (await client.get("/api/workouts")).status_code == 401
    assert (await client.post("/api/workouts", json={"title": "Run", "reps": 1, "load": 0})).status_code == 401
