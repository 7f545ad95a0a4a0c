"""Tests for the FastAPI service mode."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tagcollect.collector import TagCollector
from tagcollect.config import CollectConfig
from tagcollect.exporter import AttributeExporter
from tagcollect.models import MissingBodyError, ProgramClass
from tagcollect.service import create_app

PROGRAM = {
    "classes": [
        {
            "name": "Foo",
            "tags": [
                {"kind": "source_file", "source_file": "Foo.java"},
                {"kind": "key", "red": 0, "green": 128, "blue": 0, "key": "safe", "analysis_type": "taint"},
            ],
            "methods": [
                {
                    "name": "bar",
                    "tags": [{"kind": "text", "text": "entry"}],
                    "body": {
                        "units": [
                            {
                                "tags": [{"kind": "line_number", "line": 7}],
                                "boxes": [{"value": "y", "tags": [{"kind": "text", "text": "tainted"}]}],
                            }
                        ]
                    },
                }
            ],
        }
    ]
}


class _RecordingFactory:
    def __init__(self) -> None:
        self.configs: list[CollectConfig] = []

    def __call__(self, collect: CollectConfig) -> AttributeExporter:
        self.configs.append(collect)
        return AttributeExporter(collect=collect)


@pytest.fixture
def factory() -> _RecordingFactory:
    return _RecordingFactory()


@pytest.fixture
def client(factory: _RecordingFactory) -> TestClient:
    return TestClient(create_app(factory))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_collect_endpoint_returns_documents(client: TestClient, factory: _RecordingFactory) -> None:
    response = client.post("/collect", json={"program": PROGRAM})

    assert response.status_code == 200
    (document,) = response.json()["classes"]
    assert document["name"] == "Foo"
    # class (key tag), method, statement, tagged box
    assert document["attributes"] == 4
    assert document["keys"] == 1
    assert '<textAttribute info="tainted" aType=""/>' in document["xml"]
    assert '<key red="0" green="128" blue="0" key="safe" aType="taint"/>' in document["xml"]
    assert factory.configs == [CollectConfig(include_bodies=True, keys=True)]


def test_collect_endpoint_honours_flags(client: TestClient, factory: _RecordingFactory) -> None:
    response = client.post(
        "/collect",
        json={"program": PROGRAM, "include_bodies": False, "include_keys": False},
    )

    assert response.status_code == 200
    (document,) = response.json()["classes"]
    assert document["attributes"] == 2
    assert document["keys"] == 0
    assert factory.configs == [CollectConfig(include_bodies=False, keys=False)]


def test_collect_endpoint_maps_loader_errors(client: TestClient) -> None:
    response = client.post("/collect", json={"program": {"classes": [{"tags": []}]}})

    assert response.status_code == 400
    assert "'name' must be a non-empty string" in response.json()["detail"]


class _BrokenExporter(AttributeExporter):
    def collect_class(self, program_class: ProgramClass) -> TagCollector:
        raise MissingBodyError(f"Method 'bar' of {program_class.name} has no active body")


def test_collect_endpoint_maps_missing_bodies() -> None:
    client = TestClient(create_app(lambda collect: _BrokenExporter(collect=collect)))

    response = client.post("/collect", json={"program": PROGRAM})

    assert response.status_code == 422
    assert response.json() == {"detail": "Method 'bar' of Foo has no active body"}
