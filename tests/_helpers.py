"""Helpers comuns aos testes do stepcache.

Centraliza:
- conteúdo de step.yml válido e do template steplib.yml
- gravação de definições no layout `steps/<id>/<versão>/step.yml`
- dublê das primitivas de transporte (sem rede, sem git)
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, List, Optional

from stepcache.core.exceptions import TransportError


STEPLIB_URI = "https://github.com/example/steplib.git"

STEPLIB_YML = """\
format_version: 0.9.0
steplib_source: https://github.com/example/steplib.git
download_locations:
  - type: zip
    src: https://steps.example.com/
  - type: git
    src: source/git
"""


def step_yml(
    *,
    title: str = "Script",
    commit: str = "0123456789abcdef",
    git: str = "https://github.com/example/steps-script.git",
    extra: str = "",
) -> str:
    """Conteúdo de um step.yml válido em modo estrito."""
    return (
        f"title: {title}\n"
        "summary: Runs a script\n"
        "website: https://example.com/script\n"
        "source:\n"
        f"  git: {git}\n"
        f"  commit: {commit}\n"
        "host_os_tags:\n"
        "  - osx-10.10\n"
        "is_skippable: true\n"
        "inputs:\n"
        "  - content: echo hello\n"
        "    opts:\n"
        "      title: Script content\n"
        "      is_required: true\n"
        "outputs:\n"
        "  - SCRIPT_EXIT_CODE:\n"
        f"{extra}"
    )


def write_step(collection_root: Path, step_id: str, version: str, content: str) -> Path:
    path = collection_root / "steps" / step_id / version / "step.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class FakeTransports:
    """
    Dublê das primitivas de transporte.

    `fail` é um conjunto de fontes (URLs) cujas tentativas falham com
    `TransportError` depois de deixar lixo no destino; as demais criam o
    diretório de destino com um arquivo marcador. Todas as chamadas são
    registradas em `calls`.
    """

    def __init__(self, *, fail: Optional[set] = None, clone_source: Optional[Path] = None):
        self.fail = set(fail or ())
        self.clone_source = clone_source
        self.calls: List[tuple] = []

    def _materialize(self, src: str, dest: Path) -> None:
        dest.mkdir(parents=True, exist_ok=True)
        if src in self.fail:
            (dest / "partial").write_text("half", encoding="utf-8")
            raise TransportError(f"simulated failure: {src}")
        (dest / "marker.txt").write_text(src, encoding="utf-8")

    def download_and_extract_zip(self, url: str, dest_dir: Any) -> None:
        self.calls.append(("zip", url))
        self._materialize(url, Path(dest_dir))

    def clone_tag_or_branch_and_validate_commit(self, url, dest_dir, ref, expected_commit) -> None:
        self.calls.append(("git", url, ref, expected_commit))
        self._materialize(url, Path(dest_dir))

    def clone(self, url: str, dest_dir: Any, ref: Optional[str] = None) -> None:
        self.calls.append(("clone", url))
        if url in self.fail:
            raise TransportError(f"simulated clone failure: {url}")
        if self.clone_source is None:
            Path(dest_dir).mkdir(parents=True, exist_ok=True)
        else:
            shutil.copytree(self.clone_source, dest_dir)

    def pull(self, repo_dir: Any) -> None:
        self.calls.append(("pull", str(repo_dir)))
