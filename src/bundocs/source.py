"""Fetching the Bun docs tree from the upstream repository."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from bundocs.errors import DocsDownloadError, NavigationNotFoundError
from bundocs.navigation import has_navigation

if TYPE_CHECKING:
    from bundocs.config import AppConfig

LOGGER = logging.getLogger(__name__)

GIT_TAG_PREFIX = "bun-v"


def detect_bun_version() -> str | None:
    """Version reported by the local ``bun`` binary, if there is one."""
    try:
        completed = subprocess.run(
            ["bun", "--version"],
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return completed.stdout.strip() or None


def list_version_candidates(version: str) -> list[str]:
    """Tags worth trying for ``version``, most specific first.

    ``1.2.3-canary.4+abc`` yields ``1.2.3-canary.4`` then ``1.2.3``.
    """
    base = version.split("+", 1)[0] or version
    candidates: list[str] = []
    if base:
        candidates.append(base)
        release = base.split("-", 1)[0]
        if release and release not in candidates:
            candidates.append(release)
    return candidates


def _git(*args: str, cwd: Path | None = None) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)


def download_docs(version: str, target_dir: Path, repo_url: str) -> None:
    """Sparse-clone the ``docs`` directory of tag ``bun-v{version}`` into ``target_dir``."""
    target_dir = Path(target_dir)
    git_tag = f"{GIT_TAG_PREFIX}{version}"
    target_dir.parent.mkdir(parents=True, exist_ok=True)
    temp_dir = Path(tempfile.mkdtemp(prefix=".tmp-git-", dir=target_dir.parent))

    try:
        LOGGER.info("Downloading Bun documents for %s", git_tag)
        _git(
            "clone",
            "--filter=blob:none",
            "--sparse",
            "--depth",
            "1",
            "--branch",
            git_tag,
            repo_url,
            str(temp_dir),
        )
        _git("sparse-checkout", "set", "docs", cwd=temp_dir)

        source_dir = temp_dir / "docs"
        if not source_dir.is_dir():
            raise DocsDownloadError(f"Documentation not found in tag {git_tag}")

        shutil.rmtree(target_dir, ignore_errors=True)
        shutil.move(str(source_dir), str(target_dir))
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or str(exc)
        raise DocsDownloadError(f"Failed to download docs for {git_tag}: {detail}") from exc
    except OSError as exc:
        raise DocsDownloadError(f"Failed to download docs for {git_tag}: {exc}") from exc
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def download_with_fallback(versions: Sequence[str], target_dir: Path, repo_url: str) -> None:
    """Try each version in turn; re-raise the last failure if none works."""
    last_error: DocsDownloadError | None = None
    for version in versions:
        try:
            download_docs(version, target_dir, repo_url)
            return
        except DocsDownloadError as exc:
            LOGGER.warning("%s", exc)
            last_error = exc
    if last_error is not None:
        raise last_error
    raise DocsDownloadError("No version candidates to download")


def initialize_docs_dir(config: "AppConfig") -> Path:
    """Make sure the docs tree for ``config.version`` is on disk and usable."""
    docs_dir = config.docs_dir
    candidates = list_version_candidates(config.version or "")

    if not docs_dir.exists():
        download_with_fallback(candidates, docs_dir, config.repo_url)

    if not has_navigation(docs_dir):
        LOGGER.warning("Navigation file not found in %s, re-downloading docs", docs_dir)
        shutil.rmtree(docs_dir, ignore_errors=True)
        download_with_fallback(candidates, docs_dir, config.repo_url)
        if not has_navigation(docs_dir):
            raise NavigationNotFoundError(
                f"No navigation file found in Bun {config.version} documentation. "
                "This may indicate an incompatible Bun version or repository structure change."
            )

    return docs_dir
