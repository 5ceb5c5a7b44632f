"""
Pytest fixtures: an in-memory admin API behind httpx.MockTransport and wired dashboards.
"""
import json
import math
import re

import httpx
import pytest
import pytest_asyncio

from agro_admin.core.config import Settings
from agro_admin.core.i18n import Translator
from agro_admin.core.notifications import Notifier
from agro_admin.main import create_dashboard
from agro_admin.services.auth_service import TokenPair
from agro_admin.services.http_client import ApiClient

API_BASE = "https://api.test/api/v1/admin"
API_PREFIX = "/api/v1/admin"
ACCESS_TOKEN = "test-access-token"

SLUGS = ("category", "unity", "product", "banner", "user", "order")
# These endpoints ignore paging and answer with a bare array
UNPAGED = ("unity", "banner")
FILTER_KEYS = ("category", "status", "role", "user")


def parse_multipart(request: httpx.Request) -> tuple[dict, dict]:
    """Split a multipart body into (fields, files)."""
    boundary = request.headers["content-type"].split("boundary=")[1].encode()
    fields, files = {}, {}
    for part in request.content.split(b"--" + boundary):
        part = part.strip(b"\r\n")
        if not part or part == b"--":
            continue
        head, _, body = part.partition(b"\r\n\r\n")
        disposition = head.decode()
        name = re.search(r'name="([^"]*)"', disposition).group(1)
        filename = re.search(r'filename="([^"]*)"', disposition)
        if filename:
            files[name] = (filename.group(1), body)
        else:
            fields[name] = body.decode()
    return fields, files


def read_payload(request: httpx.Request) -> tuple[dict, dict]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        return parse_multipart(request)
    if content_type.startswith("application/json") and request.content:
        return json.loads(request.content), {}
    return {}, {}


class FakeBackend:
    """Just enough of the admin REST API for the dashboard core."""

    def __init__(self):
        self.collections = {slug: [] for slug in SLUGS}
        self.requests: list[httpx.Request] = []
        self.failures: list[httpx.Response] = []
        self.users = {"admin": "secret"}
        self._next_id = 100

    def seed(self, slug, *records):
        for record in records:
            self.collections[slug].append(dict(record))

    def fail_next(self, status_code, body=None):
        self.failures.append(httpx.Response(status_code, json=body))

    def calls(self, method=None, path=None):
        return [
            request
            for request in self.requests
            if (method is None or request.method == method)
            and (path is None or request.url.path.endswith(path))
        ]

    def last_payload(self, method):
        return read_payload(self.calls(method)[-1])

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failures:
            return self.failures.pop(0)

        path = request.url.path[len(API_PREFIX):]
        if path == "/user/login/":
            return self._login(request)
        if request.headers.get("Authorization") != f"Bearer {ACCESS_TOKEN}":
            return httpx.Response(401, json={"detail": "Authentication credentials were not provided."})

        parts = path.strip("/").split("/")
        slug = parts[0]
        if slug not in self.collections:
            return httpx.Response(404, json={"detail": "Not found."})
        if parts[1:] == ["list"] and request.method == "GET":
            return self._list(slug, request)
        if parts[1:] == ["create"] and request.method == "POST":
            return self._create(slug, request)
        if len(parts) == 3:
            record = self._find(slug, parts[1])
            if record is None:
                return httpx.Response(404, json={"detail": "Not found."})
            if parts[2] == "update" and request.method == "PATCH":
                return self._update(record, request)
            if parts[2] == "delete" and request.method == "DELETE":
                self.collections[slug].remove(record)
                return httpx.Response(204)
        return httpx.Response(405, json={"detail": "Method not allowed."})

    def _login(self, request):
        payload, _ = read_payload(request)
        if self.users.get(payload.get("username")) != payload.get("password"):
            return httpx.Response(400, json={"detail": "Invalid username or password"})
        return httpx.Response(200, json={"data": {"access": ACCESS_TOKEN, "refresh": "test-refresh"}})

    def _find(self, slug, record_id):
        for record in self.collections[slug]:
            if str(record["id"]) == record_id:
                return record
        return None

    def _list(self, slug, request):
        params = request.url.params
        rows = list(self.collections[slug])
        search = params.get("search")
        if search:
            rows = [
                row for row in rows
                if search.lower() in f"{row.get('name_uz', '')} {row.get('name_ru', '')}".lower()
            ]
        for key in FILTER_KEYS:
            if key in params:
                rows = [row for row in rows if str(row.get(key)) == params[key]]
        if "date" in params:
            rows = [row for row in rows if str(row.get("created_at", ""))[:10] == params["date"]]

        if slug in UNPAGED:
            return httpx.Response(200, json=rows)

        page = int(params.get("page", 1))
        page_size = int(params.get("page_size", 10))
        total_pages = math.ceil(len(rows) / page_size)
        if page > max(total_pages, 1):
            return httpx.Response(404, json={"detail": "Invalid page."})
        start = (page - 1) * page_size
        return httpx.Response(
            200,
            json={
                "results": rows[start:start + page_size],
                "page": page,
                "total_pages": total_pages,
                "count": len(rows),
            },
        )

    def _create(self, slug, request):
        fields, files = read_payload(request)
        if slug == "user" and any(u.get("username") == fields.get("username") for u in self.collections["user"]):
            return httpx.Response(400, json={"username": ["A user with that username already exists."]})
        self._next_id += 1
        record = {"id": self._next_id, **fields}
        record.pop("password", None)
        for name, (filename, _) in files.items():
            record[name] = f"/media/{filename}"
        self.collections[slug].append(record)
        return httpx.Response(201, json=record)

    def _update(self, record, request):
        fields, files = read_payload(request)
        fields.pop("password", None)
        record.update(fields)
        for name, (filename, _) in files.items():
            record[name] = f"/media/{filename}"
        return httpx.Response(200, json=record)


@pytest.fixture
def backend():
    """
    Create an empty fake backend.
    """
    return FakeBackend()


@pytest.fixture
def catalog(backend):
    """
    Seed categories, units and five products (three pages of two).
    """
    backend.seed(
        "category",
        {"id": 1, "name_uz": "Sabzavotlar", "name_ru": "Овощи", "image": "/media/veg.png"},
        {"id": 2, "name_uz": "Mevalar", "name_ru": "Фрукты", "image": None},
    )
    backend.seed("unity", {"id": 1, "name_uz": "kg", "name_ru": "кг"}, {"id": 2, "name_uz": "dona", "name_ru": "шт"})
    backend.seed(
        "product",
        {"id": 1, "name_uz": "Olma", "name_ru": "Яблоко", "price": "12000.00", "category": 2, "unity": 1},
        {"id": 2, "name_uz": "Banan", "name_ru": "Банан", "price": "18000.00", "category": 2, "unity": 1},
        {"id": 3, "name_uz": "Kartoshka", "name_ru": "Картофель", "price": "5000.00", "category": 1, "unity": 1},
        {"id": 4, "name_uz": "Piyoz", "name_ru": "Лук", "price": "4000.00", "category": 1, "unity": 1},
        {"id": 5, "name_uz": "Nok", "name_ru": "Груша", "price": "15000.00", "category": 2, "unity": 1},
    )
    return backend


@pytest.fixture
def settings(tmp_path):
    """
    Settings pointing at the fake API and a temporary home.
    """
    return Settings(
        api_base_url=API_BASE + "/",
        token_file=str(tmp_path / "auth.json"),
        exports_dir=str(tmp_path / "exports"),
        default_language="uz",
        page_size=2,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def dashboard(settings, backend):
    """
    Create a dashboard talking to the fake backend (not logged in).
    """
    dash = create_dashboard(settings, transport=httpx.MockTransport(backend.handle))
    yield dash
    await dash.aclose()


@pytest.fixture
def logged_in(dashboard):
    """
    The dashboard with a valid token pair stored.
    """
    dashboard.token_store.save(TokenPair(access=ACCESS_TOKEN, refresh="test-refresh"))
    return dashboard


@pytest.fixture
def notifier():
    return Notifier(Translator("uz"))


@pytest.fixture
def make_client():
    """
    Build an ApiClient around a request handler.
    """
    def _make(handler, token=ACCESS_TOKEN, language="uz"):
        client = ApiClient(
            API_BASE,
            token_provider=lambda: token,
            language_provider=lambda: language,
            transport=httpx.MockTransport(handler),
        )
        return client

    return _make
