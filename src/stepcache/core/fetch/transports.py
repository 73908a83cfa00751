# src/stepcache/core/fetch/transports.py
"""
Primitivas de transporte do stepcache.

O motor apenas sequencia e interpreta sucesso/falha destas primitivas;
qualquer objeto com os mesmos métodos pode substituir `Transports`
(ex.: dublês em testes).

Primitivas:
    - download_and_extract_zip → HTTP GET (requests) + extração (zipfile)
    - clone                    → `git clone [--branch <ref> --depth 1]`
    - commit_hash              → `git rev-parse HEAD`
    - clone_tag_or_branch_and_validate_commit → clone + verificação do commit
    - pull                     → `git pull` em um checkout existente

Política de falha:
    - Toda falha é convertida em `TransportError` (ou subclasse)
    - Nenhuma primitiva faz retry
    - Timeouts de rede são os configurados para o `requests`; o git
      herda o comportamento do binário

Limites explícitos:
    - Não decide a ordem de tentativas (ver `fetcher`)
    - Não consulta rotas nem coleções
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional, Union

import requests

from stepcache.core.exceptions import CommitHashMismatchError, TransportError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class Transports:
    """Implementação padrão das primitivas de transporte."""

    def __init__(self, *, timeout: float = 300, git_executable: str = "git"):
        self.timeout = timeout
        self.git_executable = git_executable

    # ------------------------------------------------------------------
    # zip
    # ------------------------------------------------------------------
    def download_and_extract_zip(self, url: str, dest_dir: Union[str, Path]) -> None:
        dest = Path(dest_dir)
        logger.debug("zip download url=%r dest=%s", url, dest)

        with tempfile.TemporaryDirectory(prefix="stepcache-zip-") as tmp:
            archive = Path(tmp) / "step.zip"
            try:
                with requests.get(url, stream=True, timeout=self.timeout) as resp:
                    resp.raise_for_status()
                    with archive.open("wb") as f:
                        for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
                            if chunk:
                                f.write(chunk)
            except (requests.RequestException, OSError) as e:
                raise TransportError(f"failed to download {url}: {e}") from e

            try:
                dest.mkdir(parents=True, exist_ok=True)
                with zipfile.ZipFile(archive) as zf:
                    zf.extractall(dest)
            except (zipfile.BadZipFile, OSError) as e:
                raise TransportError(f"failed to extract {url}: {e}") from e

    # ------------------------------------------------------------------
    # git
    # ------------------------------------------------------------------
    def _git(self, args: List[str], *, cwd: Optional[Path] = None) -> str:
        cmd = [self.git_executable, *args]
        logger.debug("git cmd=%r cwd=%s", cmd, cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise TransportError(f"git executable not found: {self.git_executable}") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise TransportError(f"git {' '.join(args)} failed (exit {e.returncode}): {stderr}") from e
        return result.stdout

    def clone(self, url: str, dest_dir: Union[str, Path], ref: Optional[str] = None) -> None:
        dest = Path(dest_dir)
        dest.parent.mkdir(parents=True, exist_ok=True)
        args = ["clone"]
        if ref:
            args += ["--branch", ref, "--depth", "1"]
        args += [url, str(dest)]
        self._git(args)

    def commit_hash(self, repo_dir: Union[str, Path]) -> str:
        return self._git(["rev-parse", "HEAD"], cwd=Path(repo_dir)).strip()

    def clone_tag_or_branch_and_validate_commit(
        self,
        url: str,
        dest_dir: Union[str, Path],
        ref: str,
        expected_commit: str,
    ) -> None:
        dest = Path(dest_dir)
        self.clone(url, dest, ref)
        actual = self.commit_hash(dest)
        if actual != expected_commit:
            shutil.rmtree(dest, ignore_errors=True)
            raise CommitHashMismatchError(
                f"commit hash mismatch for {url}@{ref}: expected {expected_commit}, got {actual}"
            )

    def pull(self, repo_dir: Union[str, Path]) -> None:
        self._git(["pull"], cwd=Path(repo_dir))
