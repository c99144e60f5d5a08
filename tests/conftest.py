"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from tendersync.core.source.http_source import TenderSource
from tendersync.persistence.db import Database


SOURCE_URL = "https://tenders.example.test/Tender/AllSupplierTendersForVisitorAsync"


# ==================== Fake Elasticsearch ====================


class FakeIndices:
    """Index management half of the fake client."""

    def __init__(self, client: "FakeElasticsearch"):
        self._client = client
        self.created: dict[str, Any] = {}

    async def exists(self, index: str) -> bool:
        return index in self.created or index in self._client.documents

    async def create(self, index: str, mappings: dict[str, Any] | None = None) -> dict[str, Any]:
        self.created[index] = mappings
        self._client.documents.setdefault(index, {})
        return {"acknowledged": True, "index": index}


class FakeElasticsearch:
    """In-memory stand-in for AsyncElasticsearch with upsert-by-id semantics."""

    def __init__(self):
        self.documents: dict[str, dict[str, dict[str, Any]]] = {}
        self.indices = FakeIndices(self)
        self.bulk_calls: list[dict[str, Any]] = []
        self.search_calls: list[dict[str, Any]] = []
        self.count_calls: list[dict[str, Any]] = []

        # Failure injection
        self.bulk_error: Exception | None = None
        self.fail_ids: set[str] = set()
        self.drop_items: int = 0
        self.query_error: Exception | None = None
        self.info_errors: list[Exception] = []

        # Canned read-side responses
        self.aggregations: dict[str, Any] = {}
        self.count_results: list[int] = []
        self.closed = False

    async def info(self) -> dict[str, Any]:
        if self.info_errors:
            raise self.info_errors.pop(0)
        return {"cluster_name": "test-cluster", "version": {"number": "8.12.0"}}

    async def bulk(self, operations: list[dict[str, Any]], refresh: Any = None) -> dict[str, Any]:
        self.bulk_calls.append({"operations": operations, "refresh": refresh})
        if self.bulk_error is not None:
            raise self.bulk_error

        items = []
        for action, body in zip(operations[::2], operations[1::2]):
            meta = action["index"]
            index, doc_id = meta["_index"], meta["_id"]

            if doc_id in self.fail_ids:
                items.append({
                    "index": {
                        "_index": index,
                        "_id": doc_id,
                        "status": 400,
                        "error": {"type": "mapper_parsing_exception", "reason": "bad field"},
                    }
                })
                continue

            store = self.documents.setdefault(index, {})
            existed = doc_id in store
            store[doc_id] = body
            items.append({
                "index": {
                    "_index": index,
                    "_id": doc_id,
                    "status": 200 if existed else 201,
                    "result": "updated" if existed else "created",
                }
            })

        if self.drop_items:
            items = items[: len(items) - self.drop_items]

        errors = any(item["index"]["status"] >= 300 for item in items)
        return {"took": 1, "errors": errors, "items": items}

    async def count(self, index: str, query: dict[str, Any] | None = None) -> dict[str, Any]:
        self.count_calls.append({"index": index, "query": query})
        if self.query_error is not None:
            raise self.query_error
        if self.count_results:
            return {"count": self.count_results.pop(0)}
        return {"count": len(self.documents.get(index, {}))}

    async def search(self, index: str, **kwargs: Any) -> dict[str, Any]:
        self.search_calls.append({"index": index, **kwargs})
        if self.query_error is not None:
            raise self.query_error

        if kwargs.get("aggs"):
            return {"hits": {"hits": []}, "aggregations": self.aggregations}

        docs = list(self.documents.get(index, {}).items())
        docs.sort(key=lambda item: item[1].get("added_date", ""), reverse=True)
        size = kwargs.get("size", 10)
        return {
            "hits": {
                "hits": [{"_id": doc_id, "_source": body} for doc_id, body in docs[:size]]
            }
        }

    async def close(self) -> None:
        self.closed = True

    def stored(self, index: str = "tenders") -> dict[str, dict[str, Any]]:
        return self.documents.get(index, {})


@pytest.fixture
def es_client():
    """Fresh in-memory Elasticsearch fake."""
    return FakeElasticsearch()


# ==================== External Source ====================


class SourceStub:
    """Programmable external API behind an httpx MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], Any] = lambda request: httpx.Response(
            200, json={"results": []}
        )

    def respond_json(self, body: Any, status_code: int = 200) -> None:
        self.handler = lambda request: httpx.Response(status_code, json=body)

    def respond_text(self, text: str, status_code: int = 200) -> None:
        self.handler = lambda request: httpx.Response(status_code, text=text)

    def respond_records(self, records: list[Any], key: str = "results") -> None:
        self.respond_json({key: records})

    def _dispatch(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self._dispatch))

    @property
    def last_params(self) -> dict[str, str]:
        return dict(self.requests[-1].url.params)


@pytest.fixture
def source_stub():
    """External tender API stub."""
    return SourceStub()


@pytest_asyncio.fixture
async def tender_source(source_stub):
    """TenderSource wired to the stub."""
    client = source_stub.client()
    source = TenderSource(url=SOURCE_URL, timeout=5.0, client=client)
    yield source
    await client.aclose()


# ==================== Database ====================


@pytest_asyncio.fixture
async def database(tmp_path):
    """Initialized SQLite database in a temp directory."""
    db = Database(f"sqlite:///{tmp_path / 'tendersync.db'}")
    await db.init_db_async()
    yield db
    await db.dispose_async()


@pytest_asyncio.fixture
async def uninitialized_database(tmp_path):
    """Database whose tables were never created."""
    db = Database(f"sqlite:///{tmp_path / 'empty.db'}")
    yield db
    await db.dispose_async()


# ==================== Records ====================


def make_tender(tender_id: Any = 123, **fields: Any) -> dict[str, Any]:
    """Build a raw tender record as the source returns it."""
    record: dict[str, Any] = {
        "tenderId": tender_id,
        "tenderName": f"Tender {tender_id}",
        "referenceNumber": f"REF-{tender_id}",
        "agencyName": "Ministry of Health",
        "tenderStatusId": 4,
    }
    record.update(fields)
    return record
