import logging
import uuid

import pytest
from sqlalchemy import delete

from social_api.core.config import settings
from social_api.models.storage import StoredChunk

pytestmark = pytest.mark.asyncio

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(200))


def image_files(count: int, content_type: str = "image/png"):
    return [("images", (f"photo{i}.png", PNG_BYTES + bytes([i]), content_type)) for i in range(count)]


async def create_post(client, user, files=(), title="Leg day", content="Squats and lunges, 5 sets"):
    return await client.post(
        "/api/posts",
        data={"title": title, "content": content},
        files=list(files) or None,
        headers=user["headers"],
    )


async def test_create_post_with_images(client, alice, object_store):
    # --- ACT ---
    response = await create_post(client, alice, image_files(2))

    # --- ASSERT ---
    assert response.status_code == 201, response.text
    post = response.json()
    assert post["user_id"] == alice["id"]
    assert len(post["images"]) == 2
    for image in post["images"]:
        assert image["content_type"] == "image/png"
        assert image["filename"].endswith(".png")
        assert await object_store.find_by_id(image["file_id"]) is not None


async def test_create_post_without_images(client, alice):
    response = await create_post(client, alice)

    assert response.status_code == 201, response.text
    assert response.json()["images"] == []


async def test_too_many_files_rejected_before_upload(client, alice, object_store):
    response = await create_post(client, alice, image_files(settings.storage.MAX_FILES_PER_POST + 1))

    assert response.status_code == 400
    assert "Too many files" in response.json()["detail"]
    assert await object_store.count() == 0


async def test_invalid_post_removes_uploaded_images(client, alice, object_store):
    """Пост не создан из-за валидации: уже загруженные файлы удаляются"""
    response = await create_post(client, alice, image_files(2), title="ab")

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    assert await object_store.count() == 0


async def test_create_post_requires_auth(client):
    response = await client.post("/api/posts", data={"title": "Title", "content": "Long enough content"})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_invalid_token(client):
    response = await client.get("/api/posts/all", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


async def test_image_download_by_name_and_id(client, alice):
    """Картинка отдается публично, с кэшированием и исходным именем"""
    # --- ARRANGE ---
    post = (await create_post(client, alice, image_files(1))).json()
    image = post["images"][0]

    # --- ACT ---
    by_name = await client.get(f"/api/posts/image/{image['filename']}")
    by_id = await client.get(f"/api/posts/image/id/{image['file_id']}")

    # --- ASSERT ---
    for response in (by_name, by_id):
        assert response.status_code == 200
        assert response.content == PNG_BYTES + b"\x00"
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-length"] == str(len(PNG_BYTES) + 1)
        assert response.headers["cache-control"] == "public, max-age=31536000, immutable"
        assert response.headers["content-disposition"] == "inline; filename*=UTF-8''photo0.png"


async def test_non_image_is_not_served(client, alice):
    post = (await create_post(client, alice, [("images", ("report.pdf", b"%PDF-1.4 fake", "application/pdf"))])).json()
    image = post["images"][0]

    response = await client.get(f"/api/posts/image/{image['filename']}")

    assert response.status_code == 404
    assert response.json()["detail"] == "File not found or not an image"


async def test_missing_image(client):
    by_name = await client.get("/api/posts/image/0123456789abcdef0123456789abcdef.png")
    by_id = await client.get(f"/api/posts/image/id/{uuid.uuid4()}")

    assert by_name.status_code == 404
    assert by_id.status_code == 404


async def test_malformed_image_id(client):
    response = await client.get("/api/posts/image/id/not-an-id")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid file ID format"


async def test_image_without_content_type_defaults_to_jpeg(client, object_store):
    stream = await object_store.open_upload_stream("legacy.jpg", {"original_name": "legacy.jpg"})
    async with stream:
        await stream.write(b"\xff\xd8\xff" + b"j" * 40)

    response = await client.get("/api/posts/image/legacy.jpg")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"


async def test_owner_only_delete_scenario(client, alice, bob, object_store):
    """U1 создает пост, U2 не может его удалить, U1 удаляет вместе с картинками"""
    # --- ARRANGE ---
    post = (await create_post(client, alice, image_files(2))).json()
    filenames = [image["filename"] for image in post["images"]]

    # --- ACT: чужой пользователь ---
    forbidden = await client.delete(f"/api/posts/{post['id']}", headers=bob["headers"])

    # --- ASSERT ---
    assert forbidden.status_code == 403
    assert (await client.get(f"/api/posts/{post['id']}", headers=alice["headers"])).status_code == 200
    for name in filenames:
        assert (await client.get(f"/api/posts/image/{name}")).status_code == 200

    # --- ACT: владелец ---
    deleted = await client.delete(f"/api/posts/{post['id']}", headers=alice["headers"])

    # --- ASSERT ---
    assert deleted.status_code == 200
    summary = deleted.json()["summary"]
    assert summary["post_id"] == post["id"]
    assert summary["deleted"] == 2
    assert (await client.get(f"/api/posts/{post['id']}", headers=alice["headers"])).status_code == 404
    for name in filenames:
        assert (await client.get(f"/api/posts/image/{name}")).status_code == 404
    assert await object_store.count() == 0


async def test_patch_post(client, alice, bob):
    post = (await create_post(client, alice)).json()

    forbidden = await client.patch(f"/api/posts/{post['id']}", json={"title": "x"}, headers=bob["headers"])
    updated = await client.patch(f"/api/posts/{post['id']}", json={"title": "Arm day"}, headers=alice["headers"])

    assert forbidden.status_code == 403
    assert updated.status_code == 200
    assert updated.json()["title"] == "Arm day"
    assert updated.json()["content"] == post["content"]


async def test_patch_rejects_unknown_fields(client, alice):
    post = (await create_post(client, alice, image_files(1))).json()

    response = await client.patch(
        f"/api/posts/{post['id']}",
        json={"title": "Arm day", "images": [], "user_id": 999},
        headers=alice["headers"],
    )

    assert response.status_code == 400
    after = (await client.get(f"/api/posts/{post['id']}", headers=alice["headers"])).json()
    assert after["title"] == "Leg day"
    assert len(after["images"]) == 1


async def test_list_posts(client, alice, bob):
    for i in range(3):
        await create_post(client, alice, title=f"Alice {i}")
    await create_post(client, bob, title="Bob 0")

    everyone = await client.get("/api/posts/all", params={"page": 1, "limit": 2}, headers=alice["headers"])
    mine = await client.get("/api/posts", headers=alice["headers"])

    assert everyone.status_code == 200
    body = everyone.json()
    assert [p["title"] for p in body["posts"]] == ["Bob 0", "Alice 2"]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 4, "pages": 2}
    assert mine.json()["pagination"]["total"] == 3


@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
async def test_invalid_pagination(client, alice, params):
    response = await client.get("/api/posts/all", params=params, headers=alice["headers"])

    assert response.status_code == 400


async def test_security_headers(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


@pytest.mark.parametrize("payload", [{"user_id": 99}, {"title": 12}, {"images": []}, [1, 2], None])
async def test_non_owner_patch_is_forbidden_for_any_body(client, alice, bob, payload):
    """Чужой пост: 403 при любом теле, даже невалидном"""
    # --- ARRANGE ---
    post = (await create_post(client, alice)).json()

    # --- ACT ---
    response = await client.patch(f"/api/posts/{post['id']}", json=payload, headers=bob["headers"])

    # --- ASSERT ---
    assert response.status_code == 403
    assert response.json()["error"] == "AuthorizationError"
    after = (await client.get(f"/api/posts/{post['id']}", headers=alice["headers"])).json()
    assert after["title"] == post["title"]


async def test_owner_patch_with_wrong_type(client, alice):
    post = (await create_post(client, alice)).json()

    response = await client.patch(f"/api/posts/{post['id']}", json={"title": 12}, headers=alice["headers"])

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "ValidationError"
    assert body["detail"].startswith("title:")
    assert "timestamp" in body


async def drop_chunk(object_store, file_id: str, n: int):
    async with object_store.session_factory() as session:
        await session.execute(
            delete(StoredChunk).where(StoredChunk.files_id == uuid.UUID(file_id), StoredChunk.n == n)
        )
        await session.commit()


async def test_unreadable_first_chunk_is_server_error(client, alice, object_store, caplog):
    """Ошибка до первого байта: 500 без внутренних подробностей, подробности в логе"""
    # --- ARRANGE ---
    image = (await create_post(client, alice, image_files(1))).json()["images"][0]
    await drop_chunk(object_store, image["file_id"], 0)

    # --- ACT ---
    with caplog.at_level(logging.ERROR):
        response = await client.get(f"/api/posts/image/{image['filename']}")

    # --- ASSERT ---
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "StorageError"
    assert body["detail"] == "Storage error"
    assert image["file_id"] not in response.text
    assert f"Chunk 0 of file {image['file_id']} is missing" in caplog.text


async def test_unreadable_later_chunk_cuts_response(client, alice, object_store, caplog):
    """Ошибка после начала ответа: запись в лог и обрыв соединения"""
    image = (await create_post(client, alice, image_files(1))).json()["images"][0]
    await drop_chunk(object_store, image["file_id"], 2)

    with caplog.at_level(logging.ERROR):
        with pytest.raises(RuntimeError):
            await client.get(f"/api/posts/image/{image['filename']}")

    assert f"Stream of {image['filename']} interrupted" in caplog.text
