import json
import logging
import os
import tempfile
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

# api_app configures logging at import time
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="linker-logs-"))

from shared.clients.dms.paperless.DMSClientPaperless import DMSClientPaperless
from shared.helper.HelperConfig import HelperConfig
from shared.host.LocalFileStore import LocalFileStore
from shared.host.LoggingNotifier import MemoryNotifier
from shared.logging.logging_setup import ColorLogger

BASE_URL = "https://dms.example.com"
API_TOKEN = "secret-token"


class FakePaperless:
    """In-memory Paperless-ngx server for httpx.MockTransport.

    Share links created via POST only show up in the listing after
    ``visible_after`` further listing calls, to mimic eventual consistency.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.documents: dict[str, dict] = {}
        self.tags: list[dict] = []
        self.tag_page_size = 100
        self.share_links: dict[str, list[dict]] = {}
        self.pending: dict[str, list] = {}
        self.files: dict[str, bytes] = {}
        self.visible_after = 1
        self.create_status = 201
        self.share_links_status = 200
        # raw bodies served with status 200 instead of the JSON listing
        self.share_links_body: str | None = None
        self.documents_body: str | None = None
        self.create_error: type[httpx.HTTPError] | None = None
        # number of upcoming share link listings that fail with a network fault
        self.share_links_faults = 0
        self.failing_paths: set[str] = set()
        self._next_link_id = 1

    # setup helpers
    def add_document(self, document_id: int, title: str = "", tags: list[int] | None = None, content: bytes = b"%PDF-1.7"):
        self.documents[str(document_id)] = {
            "id": document_id,
            "title": title or f"Document {document_id}",
            "tags": tags or [],
            "page_count": 1,
            "created": "2024-03-01T10:00:00Z",
            "mime_type": "application/pdf",
            "original_file_name": f"doc{document_id}.pdf",
            "content": content,
        }

    def add_tag(self, tag_id: int, name: str, color: str = "#a6cee3", text_color: str = "#000000"):
        self.tags.append({"id": tag_id, "name": name, "slug": name.lower(), "color": color, "text_color": text_color, "document_count": 0})

    def add_share_link(self, document_id: int, slug: str, expiration: str | None = None):
        self.share_links.setdefault(str(document_id), []).append(self._link(document_id, slug, expiration))
        self.files[slug] = self.documents.get(str(document_id), {}).get("content", b"%PDF-1.7")

    def _link(self, document_id, slug, expiration=None) -> dict:
        link = {
            "id": self._next_link_id,
            "document": int(document_id),
            "slug": slug,
            "expiration": expiration,
            "file_version": "original",
            "created": "2024-03-02T09:00:00Z",
        }
        self._next_link_id += 1
        return link

    # inspection helpers
    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        parts = [p for p in path.split("/") if p]

        if path in self.failing_paths:
            return httpx.Response(500, text="boom")
        if request.headers.get("Authorization") != f"Token {API_TOKEN}":
            return httpx.Response(401, json={"detail": "Invalid token."})

        if request.method == "GET" and path == "/api/documents/":
            if self.documents_body is not None:
                return httpx.Response(200, text=self.documents_body)
            ids = [int(i) for i in self.documents]
            return httpx.Response(200, json={"count": len(ids), "next": None, "all": ids, "results": []})

        if request.method == "GET" and path == "/api/tags/":
            page = int(parse_qs(request.url.query.decode()).get("page", ["1"])[0])
            start = (page - 1) * self.tag_page_size
            chunk = self.tags[start:start + self.tag_page_size]
            has_next = start + self.tag_page_size < len(self.tags)
            next_url = f"{BASE_URL}/api/tags/?format=json&page={page + 1}" if has_next else None
            return httpx.Response(200, json={"count": len(self.tags), "next": next_url, "results": chunk})

        if request.method == "POST" and path == "/api/share_links/":
            if self.create_error is not None:
                raise self.create_error("connection reset", request=request)
            if self.create_status >= 400:
                return httpx.Response(self.create_status, text="cannot create")
            body = json.loads(request.content)
            document_id = str(body["document"])
            slug = f"slug{self._next_link_id}"
            link = self._link(document_id, slug)
            self.files[slug] = self.documents.get(document_id, {}).get("content", b"%PDF-1.7")
            self.pending.setdefault(document_id, []).append([link, self.visible_after])
            return httpx.Response(self.create_status, json=link)

        if request.method == "GET" and parts[:1] == ["share"] and len(parts) == 2:
            slug = parts[1]
            if slug not in self.files:
                return httpx.Response(404)
            return httpx.Response(200, content=self.files[slug], headers={"Content-Type": "application/pdf"})

        if request.method == "GET" and parts[:2] == ["api", "documents"] and len(parts) >= 3:
            document_id = parts[2]
            if document_id not in self.documents:
                return httpx.Response(404, json={"detail": "Not found."})
            if len(parts) == 3:
                doc = {k: v for k, v in self.documents[document_id].items() if k != "content"}
                return httpx.Response(200, json=doc)
            if parts[3] == "thumb":
                return httpx.Response(200, content=f"thumb-{document_id}".encode(), headers={"Content-Type": "image/webp"})
            if parts[3] == "share_links":
                if self.share_links_faults > 0:
                    self.share_links_faults -= 1
                    raise httpx.ReadTimeout("read timed out", request=request)
                if self.share_links_body is not None:
                    return httpx.Response(200, text=self.share_links_body)
                if self.share_links_status >= 400:
                    return httpx.Response(self.share_links_status, text="unavailable")
                self._promote_pending(document_id)
                return httpx.Response(200, json=self.share_links.get(document_id, []))

        return httpx.Response(404, json={"detail": "Not found."})

    def _promote_pending(self, document_id: str) -> None:
        still_pending = []
        for entry in self.pending.get(document_id, []):
            entry[1] -= 1
            if entry[1] <= 0:
                self.share_links.setdefault(document_id, []).append(entry[0])
            else:
                still_pending.append(entry)
        self.pending[document_id] = still_pending


@pytest.fixture
def logger():
    return ColorLogger(logging.getLogger("tests"))


@pytest.fixture
def paperless_env(monkeypatch):
    monkeypatch.setenv("DMS_PAPERLESS_BASE_URL", BASE_URL)
    monkeypatch.setenv("DMS_PAPERLESS_API_KEY", API_TOKEN)


@pytest.fixture
def helper_config(logger, paperless_env):
    return HelperConfig(logger=logger)


@pytest.fixture
def fake_paperless():
    return FakePaperless()


@pytest_asyncio.fixture
async def dms_client(helper_config, fake_paperless):
    client = DMSClientPaperless(helper_config=helper_config)
    await client.boot(transport=fake_paperless.transport())
    yield client
    await client.close()


@pytest.fixture
def file_store(tmp_path):
    return LocalFileStore(tmp_path)


@pytest.fixture
def notifier():
    return MemoryNotifier()
