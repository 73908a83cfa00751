# tests/core/fetch/test_transports.py
"""
Testes das primitivas de transporte padrão.

Decisões arquiteturais:
    - HTTP é substituído via monkeypatch de `requests.get`
    - Testes de git usam um repositório local e são ignorados quando o
      binário `git` não está disponível
"""

import io
import shutil
import subprocess
import zipfile
from pathlib import Path

import pytest
import requests

from stepcache.core.exceptions import CommitHashMismatchError, TransportError
from stepcache.core.fetch import Transports


class _FakeResponse:
    def __init__(self, payload: bytes, status: int = 200):
        self.payload = payload
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.payload), chunk_size):
            yield self.payload[i : i + chunk_size]


def _zip_bytes(files):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


def test_zip_download_extracts_into_destination(tmp_path: Path, monkeypatch):
    payload = _zip_bytes({"step.sh": "echo hi", "bin/tool": "x"})
    seen = {}

    def _get(url, **kwargs):
        seen["url"] = url
        seen.update(kwargs)
        return _FakeResponse(payload)

    monkeypatch.setattr("stepcache.core.fetch.transports.requests.get", _get)

    dest = tmp_path / "cache" / "script" / "1.0.0"
    Transports(timeout=7).download_and_extract_zip("https://z/step.zip", dest)

    assert (dest / "step.sh").read_text() == "echo hi"
    assert (dest / "bin" / "tool").exists()
    assert seen["url"] == "https://z/step.zip"
    assert seen["stream"] is True
    assert seen["timeout"] == 7


@pytest.mark.parametrize(
    "response",
    [_FakeResponse(b"", status=404), _FakeResponse(b"definitely not a zip")],
)
def test_zip_failures_become_transport_errors(tmp_path: Path, monkeypatch, response):
    monkeypatch.setattr("stepcache.core.fetch.transports.requests.get", lambda url, **kw: response)
    with pytest.raises(TransportError):
        Transports().download_and_extract_zip("https://z/step.zip", tmp_path / "dest")


def test_network_error_becomes_transport_error(tmp_path: Path, monkeypatch):
    def _get(url, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr("stepcache.core.fetch.transports.requests.get", _get)
    with pytest.raises(TransportError, match="unreachable"):
        Transports().download_and_extract_zip("https://z/step.zip", tmp_path / "dest")


def test_missing_git_executable_becomes_transport_error(tmp_path: Path):
    transports = Transports(git_executable=str(tmp_path / "no-such-git"))
    with pytest.raises(TransportError, match="not found"):
        transports.clone("https://example.com/repo.git", tmp_path / "dest")


_needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not available")


def _run(cmd, cwd):
    subprocess.run(cmd, cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def tagged_repo(tmp_path: Path):
    repo = tmp_path / "origin"
    repo.mkdir()
    _run(["git", "init", "-q"], repo)
    (repo / "step.sh").write_text("echo hi", encoding="utf-8")
    _run(["git", "add", "step.sh"], repo)
    _run(["git", "-c", "user.name=t", "-c", "user.email=t@example.com", "commit", "-q", "-m", "init"], repo)
    _run(["git", "tag", "1.0.0"], repo)
    head = subprocess.run(
        ["git", "rev-parse", "HEAD"], cwd=repo, check=True, capture_output=True, text=True
    ).stdout.strip()
    return repo, head


@_needs_git
def test_clone_tag_and_validate_commit(tmp_path: Path, tagged_repo):
    repo, head = tagged_repo
    dest = tmp_path / "cache" / "script" / "1.0.0"
    transports = Transports()

    transports.clone_tag_or_branch_and_validate_commit(repo.as_uri(), dest, "1.0.0", head)

    assert (dest / "step.sh").exists()
    assert transports.commit_hash(dest) == head


@_needs_git
def test_commit_mismatch_removes_clone(tmp_path: Path, tagged_repo):
    repo, _ = tagged_repo
    dest = tmp_path / "cache" / "script" / "1.0.0"

    with pytest.raises(CommitHashMismatchError):
        Transports().clone_tag_or_branch_and_validate_commit(repo.as_uri(), dest, "1.0.0", "f" * 40)
    assert not dest.exists()


@_needs_git
def test_unknown_ref_becomes_transport_error(tmp_path: Path, tagged_repo):
    repo, head = tagged_repo
    with pytest.raises(TransportError):
        Transports().clone_tag_or_branch_and_validate_commit(repo.as_uri(), tmp_path / "d", "9.9.9", head)
