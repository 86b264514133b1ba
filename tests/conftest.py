"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
import pytest_asyncio

from specguard.db.engine import create_engine, create_session_factory, init_db
from specguard.storage.spec_store import SqlSpecStore


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'specs.db'}"


@pytest_asyncio.fixture
async def store(database_url: str):
    """A SqlSpecStore over a fresh SQLite file."""
    engine = create_engine(database_url)
    await init_db(engine)
    yield SqlSpecStore(create_session_factory(engine))
    await engine.dispose()


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A git repository with one committed file, ``src/app.py``."""
    repo = tmp_path / "repo"
    (repo / "src").mkdir(parents=True)
    _git(repo, "init", "-q")
    _git(repo, "config", "user.email", "dev@example.com")
    _git(repo, "config", "user.name", "Dev")
    (repo / "src" / "app.py").write_text("print('hello')\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "initial")
    return repo
