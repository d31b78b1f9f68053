"""Shared fixtures for catalog_assets tests."""

import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from catalog_assets.config import PipelineConfig

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        content: bytes = PNG_BYTES,
        content_type: str = "image/png",
    ):
        self.status_code = status_code
        self.content = content
        self.headers = {"Content-Type": content_type}

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession:
    """Stand-in for requests.Session that serves canned responses by URL."""

    def __init__(
        self,
        routes: Optional[Dict[str, Union[FakeResponse, Exception]]] = None,
        default: Optional[FakeResponse] = None,
    ):
        self.routes = routes or {}
        self.default = default or FakeResponse()
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def get(self, url, timeout=None):
        with self._lock:
            self.calls.append(url)
        outcome = self.routes.get(url, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        pass


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(
        output_root=tmp_path / "images",
        base_url="https://cdn.example.com",
        max_workers=4,
        timeout=5.0,
    )


@pytest.fixture
def catalog_items():
    return [
        {
            "$iFrame_IMAGE": "https://supplier.example.com/a1.jpg",
            "localfilename": "a1.jpg",
            "dbhash": "h1",
            "$iBrand": "Ray Ban",
            "$iModel": "RB2140",
            "price": 129.5,
        },
        {
            "$iBrand": "O'Neill",
            "$iFrame_IMAGE": "https://supplier.example.com/b2.jpg",
            "localfilename": "",
            "dbhash": "abc123",
            "tags": ["sun", "polarised"],
        },
        {
            "$iFrame_IMAGE": None,
            "localfilename": "c3.jpg",
            "dbhash": "h3",
            "$iBrand": "Oakley",
        },
        {
            "$iFrame_IMAGE": "https://supplier.example.com/d4.jpg",
            "localfilename": "d4.jpg",
            "dbhash": "h4",
            "nested": {"$iBrand": "not a top-level brand"},
        },
    ]
