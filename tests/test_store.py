import json

import httpx
import pytest

from collabrixo.core.errors import RemoteError, ServiceUnavailable
from collabrixo.services.appwrite import AppwriteClient
from collabrixo.services.store import CHUNK_SIZE, READ_ANY, RemoteStore, Upload, equal, order_desc

pytestmark = pytest.mark.anyio


async def test_list_is_newest_first(store, fake):
    first = fake.add_document("components", name="First")
    second = fake.add_document("components", name="Second")

    documents = await store.list("components", order_by="$createdAt")

    assert [d["$id"] for d in documents] == [second["$id"], first["$id"]]


async def test_list_sends_json_queries(store, fake):
    fake.add_document("meetings", date="2024-05-01T10:00:00+00:00")
    await store.list("meetings", order_by="date", filters=[equal("agenda", "Sprint review")])

    method, path = fake.calls[-1]
    assert (method, path) == ("GET", "/databases/db/collections/meetings/documents")
    queries = [json.loads(q) for q in fake.requests[-1].url.params.get_list("queries[]")]
    assert queries == [
        {"method": "orderDesc", "attribute": "date"},
        {"method": "equal", "attribute": "agenda", "values": ["Sprint review"]},
        {"method": "limit", "values": [100]},
    ]
    assert order_desc("date") == json.dumps(queries[0])


async def test_create_lets_the_store_assign_ids(store, fake):
    doc = await store.create("components", {"name": "Navbar"}, READ_ANY)

    assert doc["$id"].startswith("doc")
    assert doc["$permissions"] == READ_ANY
    assert fake.documents["components"][doc["$id"]]["name"] == "Navbar"


async def test_update_is_partial(store, fake):
    doc = fake.add_document("components", name="Navbar", assignee="Ada")

    updated = await store.update("components", doc["$id"], {"assignee": "Grace"})

    assert updated["name"] == "Navbar"
    assert updated["assignee"] == "Grace"


async def test_get_missing_document_raises_not_found(store):
    with pytest.raises(RemoteError) as exc_info:
        await store.get("components", "nope")

    assert exc_info.value.not_found
    assert exc_info.value.type == "document_not_found"
    assert "could not be found" in exc_info.value.message


async def test_delete_document(store, fake):
    doc = fake.add_document("timeline", title="Kickoff", date="2024-01-01")

    await store.delete("timeline", doc["$id"])

    assert doc["$id"] not in fake.documents["timeline"]


async def test_upload_object_returns_assigned_id(store, fake):
    object_id = await store.upload_object(Upload("mock.png", b"\x89PNG...", "image/png"), READ_ANY)

    assert fake.files[object_id]["name"] == "mock.png"
    assert fake.files[object_id]["chunks"] == 1


async def test_large_upload_goes_in_chunks(store, fake):
    upload = Upload("video.mp4", b"x" * (CHUNK_SIZE * 2 + 10), "video/mp4")

    object_id = await store.upload_object(upload)

    assert fake.files[object_id]["chunks"] == 3
    assert fake.files[object_id]["range"] == f"bytes {CHUNK_SIZE * 2}-{upload.size - 1}/{upload.size}"


async def test_delete_object(store, fake):
    object_id = fake.add_file()

    await store.delete_object(object_id)

    assert object_id not in fake.files


def test_object_url_is_view_url(store):
    assert store.object_url("file1") == "https://appwrite.test/v1/storage/buckets/bucket/files/file1/view?project=proj"


def test_object_url_requires_id(store):
    with pytest.raises(ValueError):
        store.object_url("")


async def test_subscribe_uses_collection_channel(store, feed):
    seen = []
    unsubscribe = store.subscribe("components", seen.append)

    assert feed.listeners("databases.db.collections.components.documents") == 1
    unsubscribe()
    assert feed.listeners("databases.db.collections.components.documents") == 0


def test_subscribe_without_feed_is_a_noop(appwrite):
    store = RemoteStore(appwrite, database_id="db", bucket_id="bucket")

    unsubscribe = store.subscribe("components", lambda event: None)

    unsubscribe()


async def test_transport_failure_becomes_remote_error(test_settings):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(base_url=test_settings.APPWRITE_ENDPOINT, transport=httpx.MockTransport(refuse))
    store = RemoteStore.from_settings(test_settings, AppwriteClient.from_settings(test_settings, http))

    with pytest.raises(RemoteError) as exc_info:
        await store.list("components")

    assert exc_info.value.status is None


async def test_client_not_started_is_unavailable(test_settings):
    store = RemoteStore.from_settings(test_settings, AppwriteClient.from_settings(test_settings, None))

    with pytest.raises(ServiceUnavailable):
        await store.list("components")


def test_client_headers_carry_project_key_and_session(appwrite):
    assert appwrite.headers() == {
        "X-Appwrite-Project": "proj",
        "X-Appwrite-Key": "server-key",
        "X-Appwrite-Session": "secret-test",
    }
    assert "X-Appwrite-Session" not in appwrite.with_session(None).headers()
