"""Shared test fixtures for auditscope tests."""

import os
import threading
from pathlib import Path

import pytest

from auditscope.analyzers.base import AuditContext
from auditscope.config import AuditConfig
from auditscope.models import SourceUnit
from auditscope.scanning.files import SourceCollection
from auditscope.scanning.languages import detect_language
from auditscope.scanning.provider import SyntaxTreeProvider


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path_factory):
    """Keep the user's ~/.auditscope.toml and AUDITSCOPE_* vars out of tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("AUDITSCOPE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def project(tmp_path) -> Path:
    """Empty project root with a package.json manifest."""
    (tmp_path / "package.json").write_text('{"name": "webapp", "version": "1.0.0"}\n')
    return tmp_path


def make_unit(path: str, text: str) -> SourceUnit:
    """SourceUnit with its language detected from the path."""
    return SourceUnit(path=path, text=text, language=detect_language(path))


@pytest.fixture
def unit():
    return make_unit


@pytest.fixture
def make_context(tmp_path):
    """Build an AuditContext over in-memory units rooted at tmp_path."""

    def _make(*units, root=None, config=None, **kwargs):
        root = Path(root or tmp_path)
        config = config or AuditConfig(roots=(str(root),), require_manifest=False)
        kwargs.setdefault("cancel_event", threading.Event())
        return AuditContext(
            config=config,
            sources=SourceCollection(root=root, units=list(units)),
            **kwargs,
        )

    return _make


@pytest.fixture(scope="session")
def syntax():
    """Shared syntax-tree provider that does not require a manifest."""
    return SyntaxTreeProvider(require_manifest=False)


@pytest.fixture
def parse(syntax):
    """Parse source text and return (unit, root SyntaxNode)."""

    def _parse(text: str, path: str = "src/module.js"):
        source = make_unit(path, text)
        return source, syntax.root(source)

    return _parse
