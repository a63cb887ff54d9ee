import shutil
from collections.abc import Generator
from pathlib import Path

import pytest

_ENV_VARS = (
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "AAC_PROVIDER",
    "AAC_LLM_MODEL",
    "AAC_LLM_ENDPOINT",
    "AAC_AUTO_COMMIT",
    "AAC_LLM_REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def isolated_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[Path, None, None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / ".aac"
    monkeypatch.setenv("AAC_CONFIG_HOME", str(home))
    yield home


# Ensure no real Gemini network calls escape during tests that don't
# explicitly mock the endpoint.
@pytest.fixture(autouse=True)
def _block_gemini(monkeypatch):
    import httpx

    original_post = httpx.post

    def fake_post(url, *args, **kwargs):  # noqa: D401
        if isinstance(url, str) and "generativelanguage.googleapis.com" in url:
            raise httpx.ConnectError("network disabled in tests")
        return original_post(url, *args, **kwargs)

    monkeypatch.setattr(httpx, "post", fake_post)


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A real repository with one commit and identity configured."""
    import subprocess

    if shutil.which("git") is None:
        pytest.skip("git binary not available")
    repo = tmp_path / "repo"
    repo.mkdir()
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")

    def git(*args: str) -> None:
        subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)

    git("init", "-q")
    git("config", "user.email", "dev@example.com")
    git("config", "user.name", "Dev")
    git("config", "commit.gpgsign", "false")
    (repo / "a.txt").write_text("a\n")
    git("add", "a.txt")
    git("commit", "-q", "-m", "chore: init")
    return repo
