"""Common test fixtures."""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from dabox.clients.directory import DirectoryClient
from dabox.config import ConfigManager, DaboxConfig

TEST_USER_ID = 42

_SID_PATH = re.compile(r"^/directory/(-?\d+)$")


@dataclass
class StoredDirectory:
    sid: int
    name: str
    parent: Optional[int]
    depth: int
    children: List[int] = field(default_factory=list)


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: httpx.Headers
    body: Optional[dict]


class FakeDirectoryStore:
    """In-memory directory store speaking the /directory wire protocol.

    Directories live in one bucket per identity header value. ``GET
    /directory/0`` resolves to the bucket's root. Deletes cascade to the
    whole subtree and answer with an empty body.

    Failures are injected per method with ``fail_next`` (an HTTP status) or
    ``disconnect_next`` (the request never reaches the store).
    """

    def __init__(self, identity_header: str = "X-Entity-Uid"):
        self.identity_header = identity_header
        self.buckets: Dict[str, Dict[int, StoredDirectory]] = {}
        self.next_sid: Dict[str, int] = {}
        self.requests: List[RecordedRequest] = []
        self._failures: Dict[str, List[Tuple[int, str]]] = {}
        self._disconnects: Dict[str, int] = {}

    # --- Test controls ---

    def fail_next(self, method: str, status: int, body: str = "") -> None:
        self._failures.setdefault(method, []).append((status, body))

    def disconnect_next(self, method: str) -> None:
        self._disconnects[method] = self._disconnects.get(method, 0) + 1

    def calls(self, method: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.method == method]

    def seed(self, owner: str, name: str, parent: Optional[int] = None) -> int:
        bucket = self.buckets.setdefault(owner, {})
        sid = self.next_sid.get(owner, 1)
        self.next_sid[owner] = sid + 1
        depth = 0 if parent is None else bucket[parent].depth + 1
        bucket[sid] = StoredDirectory(sid=sid, name=name, parent=parent, depth=depth)
        if parent is not None:
            bucket[parent].children.append(sid)
        return sid

    # --- Wire ---

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append(RecordedRequest(method, path, request.headers, body))

        if self._disconnects.get(method):
            self._disconnects[method] -= 1
            raise httpx.ConnectError("Connection refused", request=request)

        if self._failures.get(method):
            status, text = self._failures[method].pop(0)
            return httpx.Response(status, text=text)

        owner = request.headers.get(self.identity_header)
        if owner is None or not owner.isdigit():
            return httpx.Response(403, text="Forbidden")
        bucket = self.buckets.setdefault(owner, {})

        if method == "POST" and path == "/directory":
            parent = body.get("parent")
            if parent is not None and parent not in bucket:
                return httpx.Response(404, text="Not found")
            sid = self.seed(owner, body["name"], parent)
            return httpx.Response(200, json=self._render(bucket, sid))

        match = _SID_PATH.match(path)
        if match is None:
            return httpx.Response(404, text="Not found")
        sid = self._resolve(bucket, int(match.group(1)))
        if sid is None:
            return httpx.Response(404, text="Not found")

        if method == "GET":
            return httpx.Response(200, json=self._render(bucket, sid))
        if method == "PUT":
            bucket[sid].name = body["name"]
            return httpx.Response(200, json=self._render(bucket, sid))
        if method == "DELETE":
            self._delete(bucket, sid)
            return httpx.Response(200, headers={"Content-Length": "0"})
        return httpx.Response(405, text="Method not allowed")

    def _resolve(self, bucket: Dict[int, StoredDirectory], sid: int) -> Optional[int]:
        if sid == 0:
            roots = [d.sid for d in bucket.values() if d.parent is None]
            return roots[0] if roots else None
        return sid if sid in bucket else None

    def _render(self, bucket: Dict[int, StoredDirectory], sid: int) -> dict:
        directory = bucket[sid]
        return {
            "sid": directory.sid,
            "name": directory.name,
            "parent_sid": directory.parent,
            "depth": directory.depth,
            "children": [self._render(bucket, child) for child in directory.children],
        }

    def _delete(self, bucket: Dict[int, StoredDirectory], sid: int) -> None:
        parent = bucket[sid].parent
        pending = [sid]
        while pending:
            removed = bucket.pop(pending.pop())
            pending.extend(removed.children)
        if parent is not None:
            bucket[parent].children.remove(sid)


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("DABOX_CONFIG_DIR", str(tmp_path / ".dabox"))
    for name in ("DABOX_USER_ID", "DABOX_API_URL", "DABOX_ROOT_NAME", "DABOX_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def app_config(config_home) -> DaboxConfig:
    return DaboxConfig(env="test", api_url="http://test", user_id=TEST_USER_ID)


@pytest.fixture
def config_manager(app_config: DaboxConfig, config_home: Path) -> ConfigManager:
    # Invalidate config cache to ensure clean state for each test
    from dabox import config as config_module

    config_module._CONFIG_CACHE = None

    config_manager = ConfigManager()
    config_manager.save_config(app_config)
    yield config_manager
    config_module._CONFIG_CACHE = None


@pytest.fixture
def store() -> FakeDirectoryStore:
    return FakeDirectoryStore()


@pytest_asyncio.fixture
async def http_client(store: FakeDirectoryStore) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTPX client wired to the fake store."""
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(store.handle), base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def directory_client(http_client: httpx.AsyncClient) -> DirectoryClient:
    return DirectoryClient(http_client, TEST_USER_ID)


@pytest.fixture
def seeded_store(store: FakeDirectoryStore) -> FakeDirectoryStore:
    """Store holding Root(1) -> A(2), B(3); A(2) -> A1(4)."""
    owner = str(TEST_USER_ID)
    root = store.seed(owner, "Root")
    a = store.seed(owner, "A", root)
    store.seed(owner, "B", root)
    store.seed(owner, "A1", a)
    return store
