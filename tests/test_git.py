import subprocess

import pytest

from aac.exceptions import CommitFailed, DiffUnavailable, GitError
from aac.git import GitRepo, find_git_repo_root, parse_name_status
from aac.vcs import Change


def _bare_repo(tmp_path):
    repo = object.__new__(GitRepo)
    repo.repo_path = tmp_path
    return repo


def test_gitrepo_init_validates_repo(monkeypatch):
    monkeypatch.setattr(GitRepo, "_is_git_repo", lambda self: False)

    with pytest.raises(GitError):
        GitRepo(".")


def test_run_git_command_called_process_error(monkeypatch, tmp_path):
    def fake_run(*args, **kwargs):
        raise subprocess.CalledProcessError(1, "git", stderr="bad\n")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(GitError) as ei:
        GitRepo._run_git_command(_bare_repo(tmp_path), ["x"])
    assert "failed" in str(ei.value)


def test_run_git_command_file_not_found(monkeypatch, tmp_path):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError()

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(GitError) as ei:
        GitRepo._run_git_command(_bare_repo(tmp_path), ["x"])
    assert "not found" in str(ei.value).lower()


def test_staged_diff_failure_is_diff_unavailable(monkeypatch, tmp_path):
    def fake_run(*args, **kwargs):
        raise subprocess.CalledProcessError(128, "git", stderr="fatal\n")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(DiffUnavailable) as ei:
        _bare_repo(tmp_path).get_staged_diff()
    assert ei.value.repo_path == str(tmp_path)


def test_commit_passes_message_as_single_argument(monkeypatch, tmp_path):
    calls = []

    class _R:
        stdout = ""

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return _R()

    monkeypatch.setattr(subprocess, "run", fake_run)
    message = 'fix: handle "quoted" names\n\nand $(shell) text'

    _bare_repo(tmp_path).commit(message)

    assert calls == [["git", "commit", "-m", message]]


def test_commit_failure_is_commit_failed(monkeypatch, tmp_path):
    def fake_run(*args, **kwargs):
        raise subprocess.CalledProcessError(1, "git", stderr="nothing to commit\n")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(CommitFailed) as ei:
        _bare_repo(tmp_path).commit("fix: something")
    assert "nothing to commit" in str(ei.value)


def test_parse_name_status_handles_renames_and_blanks():
    output = "M\tsrc/app.py\nA\tnew.txt\n\nR100\told.txt\trenamed.txt\n"

    assert parse_name_status(output) == [
        Change("src/app.py", "M"),
        Change("new.txt", "A"),
        Change("renamed.txt", "R"),
    ]


def test_real_repository_staged_flow(git_repo):
    repo = GitRepo(str(git_repo))
    assert repo.get_staged_diff() == ""
    assert repo.snapshot().staged == ()

    (git_repo / "a.txt").write_text("a\nb\n")
    (git_repo / "b.txt").write_text("new\n")
    subprocess.run(["git", "add", "b.txt"], cwd=git_repo, check=True)

    state = repo.snapshot()
    assert state.staged == (Change("b.txt", "A"),)
    assert state.unstaged == (Change("a.txt", "M"),)
    assert "+new" in repo.get_staged_diff()

    repo.commit('feat: add "b" file')
    log = subprocess.run(
        ["git", "log", "-1", "--pretty=%s"],
        cwd=git_repo,
        capture_output=True,
        text=True,
        check=True,
    )
    assert log.stdout.strip() == 'feat: add "b" file'
    assert repo.list_staged_changes() == []


def test_find_git_repo_root_from_subdirectory(git_repo):
    sub = git_repo / "pkg" / "mod"
    sub.mkdir(parents=True)

    assert find_git_repo_root(sub).resolve() == git_repo.resolve()
