"""
Shared pytest fixtures for the Collabrixo test suite.

Provides:
    - fake: in-memory Appwrite (account, databases, storage) behind httpx.MockTransport
    - test_settings: fully configured Settings (no .env lookup)
    - store: RemoteStore wired to the fake with a live ChangeFeed
    - context / client: FastAPI app + TestClient (lifespan runs)
    - signed_in: client carrying a valid app token cookie
"""

import os

# must be in place before collabrixo.core.config builds its singleton
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("ENV", "test")

import itertools
import json
import re
from collections import defaultdict
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from collabrixo.core.config import Settings
from collabrixo.core.context import AppContext
from collabrixo.main import create_app
from collabrixo.services.appwrite import AppwriteClient
from collabrixo.services.changes import ChangeFeed
from collabrixo.services.store import RemoteStore

ENDPOINT = "https://appwrite.test/v1"

TEST_VALUES = {
    "ENV": "test",
    "LOG_FILE": "",
    "LOG_LEVEL": "WARNING",
    "API_BASE_URL": "http://testserver",
    "SECRET_KEY": "test-secret-key",
    "APPWRITE_ENDPOINT": ENDPOINT,
    "APPWRITE_PROJECT_ID": "proj",
    "APPWRITE_DATABASE_ID": "db",
    "APPWRITE_COMPONENT_COLLECTION_ID": "components",
    "APPWRITE_MEETING_COLLECTION_ID": "meetings",
    "APPWRITE_TIMELINE_COLLECTION_ID": "timeline",
    "APPWRITE_RESOURCE_COLLECTION_ID": "resources",
    "APPWRITE_BUCKET_ID": "bucket",
    "APPWRITE_TIMER_COLLECTION_ID": "timer",
    "APPWRITE_API_KEY": "server-key",
}

TEST_EMAIL = "ada@example.com"
TEST_PASSWORD = "correct-horse"


# ── Fake Appwrite ────────────────────────────────────────────────────────


def _error(status, message, type_="general_mock"):
    return httpx.Response(status, json={"message": message, "type": type_, "code": status})


class FakeAppwrite:
    """Just enough of the Appwrite REST API for the board, kept in memory.

    Every request is recorded in `calls` as (method, path). Set
    `fail[(METHOD, fragment)] = status` to make matching requests fail.
    """

    def __init__(self):
        self.documents = defaultdict(dict)
        self.files = {}
        self.users = {}
        self.sessions = {}
        self.calls = []
        self.requests = []
        self.fail = {}
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def new_id(self, prefix):
        return f"{prefix}{next(self._ids)}"

    def now(self):
        # strictly increasing so "$createdAt" ordering is deterministic
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def calls_to(self, method, fragment=""):
        return [path for m, path in self.calls if m == method and fragment in path]

    @property
    def remote_writes(self):
        return [(m, p) for m, p in self.calls if m in ("POST", "PATCH", "PUT", "DELETE")]

    # --- seeding helpers ---

    def add_user(self, email=TEST_EMAIL, password=TEST_PASSWORD, name="Ada"):
        user = {"$id": self.new_id("user"), "email": email, "name": name, "password": password}
        self.users[email] = user
        return user

    def add_document(self, collection, **data):
        now = self.now()
        doc = {"$id": data.pop("$id", None) or self.new_id("doc"), "$createdAt": now, "$updatedAt": now, **data}
        self.documents[collection][doc["$id"]] = doc
        return doc

    def add_file(self, name="file.bin", content=b"data"):
        file_id = self.new_id("file")
        self.files[file_id] = {"name": name, "size": len(content)}
        return file_id

    # --- transport entry point ---

    def __call__(self, request):
        path = request.url.path
        if path.startswith("/v1"):
            path = path[len("/v1"):]
        self.calls.append((request.method, path))
        self.requests.append(request)

        for (method, fragment), status in self.fail.items():
            if request.method == method and fragment in path:
                return _error(status, "Simulated failure")

        parts = path.strip("/").split("/")
        if parts[0] == "account":
            return self._account(request, parts)
        if parts[0] == "databases":
            return self._databases(request, parts)
        if parts[0] == "storage":
            return self._storage(request, parts)
        return _error(404, "Route not found")

    # --- account ---

    def _account(self, request, parts):
        if request.method == "GET" and parts == ["account"]:
            secret = request.headers.get("X-Appwrite-Session")
            email = self.sessions.get(secret)
            if not email:
                return _error(401, "User (role: guests) missing scope (account)", "general_unauthorized_scope")
            return httpx.Response(200, json=self._public(self.users[email]))

        if request.method == "POST" and parts == ["account"]:
            body = json.loads(request.content)
            if body["email"] in self.users:
                return _error(409, "A user with the same email already exists.", "user_already_exists")
            user = self.add_user(body["email"], body["password"], body.get("name", ""))
            return httpx.Response(201, json=self._public(user))

        if request.method == "POST" and parts == ["account", "sessions", "email"]:
            body = json.loads(request.content)
            user = self.users.get(body["email"])
            if not user or user["password"] != body["password"]:
                return _error(401, "Invalid credentials. Please check the email and password.", "user_invalid_credentials")
            secret = self.new_id("secret")
            self.sessions[secret] = user["email"]
            # the secret is only in the body when a server key was sent
            payload = {"$id": self.new_id("session"), "userId": user["$id"], "secret": ""}
            if request.headers.get("X-Appwrite-Key"):
                payload["secret"] = secret
            response = httpx.Response(201, json=payload)
            response.headers["set-cookie"] = f"a_session_proj={secret}; Path=/"
            return response

        if request.method == "DELETE" and parts[:2] == ["account", "sessions"]:
            self.sessions.pop(request.headers.get("X-Appwrite-Session"), None)
            return httpx.Response(204)

        return _error(404, "Route not found")

    @staticmethod
    def _public(user):
        return {key: value for key, value in user.items() if key != "password"}

    # --- databases ---

    def _databases(self, request, parts):
        # databases/{db}/collections/{collection}/documents[/{id}]
        collection = parts[3]
        docs = self.documents[collection]
        doc_id = parts[5] if len(parts) > 5 else None

        if request.method == "GET" and doc_id is None:
            documents = list(docs.values())
            for raw in request.url.params.get_list("queries[]"):
                query = json.loads(raw)
                if query["method"] in ("orderDesc", "orderAsc"):
                    documents.sort(
                        key=lambda d: str(d.get(query["attribute"], "")),
                        reverse=query["method"] == "orderDesc",
                    )
                elif query["method"] == "limit":
                    documents = documents[: query["values"][0]]
            return httpx.Response(200, json={"total": len(documents), "documents": documents})

        if request.method == "POST" and doc_id is None:
            body = json.loads(request.content)
            doc = self.add_document(collection, **body["data"])
            doc["$permissions"] = body.get("permissions", [])
            return httpx.Response(201, json=doc)

        if doc_id not in docs:
            return _error(404, "Document with the requested ID could not be found.", "document_not_found")

        if request.method == "GET":
            return httpx.Response(200, json=docs[doc_id])
        if request.method == "PATCH":
            docs[doc_id].update(json.loads(request.content)["data"])
            docs[doc_id]["$updatedAt"] = self.now()
            return httpx.Response(200, json=docs[doc_id])
        if request.method == "DELETE":
            del docs[doc_id]
            return httpx.Response(204)
        return _error(405, "Method not allowed")

    # --- storage ---

    def _storage(self, request, parts):
        # storage/buckets/{bucket}/files[/{id}[/view]]
        file_id = parts[4] if len(parts) > 4 else None

        if request.method == "POST" and file_id is None:
            file_id = request.headers.get("X-Appwrite-ID") or self.new_id("file")
            match = re.search(rb'filename="([^"]*)"', request.content)
            name = match.group(1).decode() if match else "upload"
            entry = self.files.setdefault(file_id, {"name": name, "size": 0, "chunks": 0})
            entry["chunks"] = entry.get("chunks", 0) + 1
            entry["range"] = request.headers.get("Content-Range")
            return httpx.Response(201, json={"$id": file_id, "name": name})

        if file_id not in self.files:
            return _error(404, "The requested file could not be found.", "storage_file_not_found")
        if request.method == "DELETE":
            del self.files[file_id]
            return httpx.Response(204)
        return _error(405, "Method not allowed")


# ── Fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake():
    return FakeAppwrite()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, **TEST_VALUES)


@pytest.fixture
def unconfigured_settings():
    values = {**TEST_VALUES, "APPWRITE_DATABASE_ID": "", "APPWRITE_BUCKET_ID": ""}
    return Settings(_env_file=None, **values)


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def http(fake):
    return httpx.AsyncClient(base_url=ENDPOINT, transport=httpx.MockTransport(fake))


@pytest.fixture
def appwrite(test_settings, http):
    return AppwriteClient.from_settings(test_settings, http, session="secret-test")


@pytest.fixture
def store(test_settings, appwrite, feed):
    return RemoteStore.from_settings(test_settings, appwrite, feed=feed)


@pytest.fixture
def context(test_settings, fake):
    return AppContext(test_settings, transport=httpx.MockTransport(fake))


@pytest.fixture
def client(context):
    with TestClient(create_app(context)) as test_client:
        yield test_client


@pytest.fixture
def user(fake):
    return fake.add_user()


@pytest.fixture
def signed_in(client, user):
    response = client.post("/api/v1/auth/sign-in", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
    assert response.status_code == 200, response.text
    return client
