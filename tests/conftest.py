# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures shared by the tyler test suite."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import httpx
import pytest
from click.testing import CliRunner
from PIL import Image

from tyler_cli.main import Context
from tyler_publish import ProcessRequest, ProcessResult

MANIFEST = """\
[package]
name = "my-package"
version = "0.1.0"
entrypoint = "lib.typ"
authors = ["Jane Doe <@janedoe>"]
license = "MIT"
description = "An example package"
keywords = ["example"]
categories = ["utility"]
"""

INDEX_ENTRIES: list[dict[str, Any]] = [
    {"name": "cetz", "version": "0.2.0", "entrypoint": "src/lib.typ", "keywords": ["drawing"]},
    {"name": "cetz", "version": "0.3.0", "entrypoint": "src/lib.typ", "keywords": ["drawing", "plot"]},
    {"name": "my-package", "version": "0.1.0", "entrypoint": "lib.typ", "keywords": ["example"]},
]

PULL_REQUEST = {
    "number": 1234,
    "head": {
        "ref": "my-package-0.1.0",
        "repo": {
            "clone_url": "https://github.com/janedoe/packages.git",
            "owner": {"login": "janedoe"},
        },
    },
}


def _strip_repo(args: Sequence[str]) -> tuple[str, ...]:
    args = tuple(args)
    if args[:1] == ("-C",):
        return args[2:]
    return args


class FakeRunner:
    """Scripted process port.

    Records every request and answers from a table keyed by argument prefix
    (with any leading ``-C <repo>`` removed). Unlisted commands succeed with
    empty output.
    """

    def __init__(self, responses: Optional[dict[tuple[str, ...], ProcessResult]] = None):
        self.requests: list[ProcessRequest] = []
        self.responses = dict(responses or {})

    def run(self, request: ProcessRequest) -> ProcessResult:
        self.requests.append(request)
        args = _strip_repo(request.args)
        for prefix, result in self.responses.items():
            if args[: len(prefix)] == prefix:
                return result
        return ProcessResult(exit_code=0)

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [_strip_repo(request.args) for request in self.requests]


class ScriptedDecisions:
    """Decision provider answering from prepared queues, defaults once exhausted."""

    def __init__(
        self,
        confirms: Sequence[bool] = (),
        choices: Sequence[str] = (),
        texts: Sequence[str] = (),
    ):
        self.confirms = list(confirms)
        self.choices = list(choices)
        self.texts = list(texts)
        self.prompts: list[str] = []

    def ask_confirm(self, prompt: str, default: bool = False) -> bool:
        self.prompts.append(prompt)
        return self.confirms.pop(0) if self.confirms else default

    def ask_choice(self, prompt: str, options: Sequence[tuple[str, str]], default: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.choices:
            choice = self.choices.pop(0)
            assert choice in [value for value, _ in options]
            return choice
        assert default is not None
        return default

    def ask_text(self, prompt: str, default: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.texts:
            return self.texts.pop(0)
        assert default is not None
        return default


def index_handler(
    entries: list[dict[str, Any]],
    pull_requests: Optional[dict[int, Any]] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Serve ``index.json`` and GitHub pull request lookups from memory."""
    pull_requests = pull_requests or {}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/index.json"):
            return httpx.Response(200, json=entries)
        if "/pulls/" in path:
            number = int(path.rsplit("/", 1)[-1])
            if number in pull_requests:
                return httpx.Response(200, json=pull_requests[number])
        return httpx.Response(404, json={"message": "Not Found"})

    return handler


def unreachable_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def package_dir(tmp_path: Path) -> Path:
    """Create a minimal valid package with its sources under src/."""
    workdir = tmp_path / "my-package"
    (workdir / "src").mkdir(parents=True)
    (workdir / "typst.toml").write_text(MANIFEST, encoding="utf-8")
    (workdir / "README.md").write_text("# my-package\n", encoding="utf-8")
    (workdir / "LICENSE").write_text("MIT License\n", encoding="utf-8")
    (workdir / "src" / "lib.typ").write_text("#let greet(name) = [Hello, #name!]\n", encoding="utf-8")
    return workdir


@pytest.fixture
def template_package_dir(package_dir: Path, make_png: Callable[..., Path]) -> Path:
    """Extend the sample package into a template package."""
    template_dir = package_dir / "src" / "template"
    template_dir.mkdir()
    (template_dir / "main.typ").write_text(
        '#import "../lib.typ": *\n\n#greet("World")\n', encoding="utf-8"
    )
    make_png(package_dir / "thumbnail.png", (1200, 1600))

    manifest = package_dir / "typst.toml"
    manifest.write_text(
        manifest.read_text(encoding="utf-8")
        + '\n[template]\npath = "template"\nentrypoint = "main.typ"\nthumbnail = "thumbnail.png"\n',
        encoding="utf-8",
    )
    return package_dir


@pytest.fixture
def make_png() -> Callable[..., Path]:
    """Return a helper that writes a solid-color PNG of the given size."""

    def _make(path: Path, size: tuple[int, int] = (1080, 1080), fmt: str = "PNG") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color=(32, 96, 160)).save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def index_entries() -> list[dict[str, Any]]:
    return [dict(entry) for entry in INDEX_ENTRIES]


@pytest.fixture
def index_transport(index_entries: list[dict[str, Any]]) -> httpx.MockTransport:
    """Transport serving the sample index and pull request 1234."""
    return httpx.MockTransport(index_handler(index_entries, {1234: PULL_REQUEST}))


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def cli_context(index_transport: httpx.MockTransport, fake_runner: FakeRunner, tmp_path: Path) -> Context:
    """CLI context wired to in-memory collaborators and temporary directories."""
    ctx = Context()
    ctx.http_transport = index_transport
    ctx.process_runner = fake_runner
    ctx.repository_dir = tmp_path / "publish" / "packages"
    ctx.local_packages_dir = tmp_path / "local"
    return ctx


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Return a factory for scripted process runners."""
    return FakeRunner


@pytest.fixture
def make_decisions() -> Callable[..., ScriptedDecisions]:
    """Return a factory for decision providers answering from prepared queues."""
    return ScriptedDecisions


@pytest.fixture
def pull_request_payload() -> dict[str, Any]:
    """GitHub API payload of pull request 1234."""
    return copy.deepcopy(PULL_REQUEST)


@pytest.fixture
def make_index_transport() -> Callable[..., httpx.MockTransport]:
    """Return a helper serving the given index entries and pull requests."""

    def _make(entries: list[dict[str, Any]], pull_requests: Optional[dict[int, Any]] = None) -> httpx.MockTransport:
        return httpx.MockTransport(index_handler(entries, pull_requests))

    return _make


@pytest.fixture
def unreachable_transport() -> httpx.MockTransport:
    """Transport failing every request with a connection error."""
    return httpx.MockTransport(unreachable_handler)
