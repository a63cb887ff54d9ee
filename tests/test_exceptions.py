from aac.exceptions import (
    AutoCommitError,
    CommitFailed,
    ConfigError,
    DiffUnavailable,
    GenAuthError,
    GenQuotaError,
    GenUnavailable,
    GitError,
    LLMError,
    NoApiKeyConfigured,
    SanitizeRejected,
    ValidationError,
)


def test_exceptions_hierarchy():
    assert issubclass(GitError, AutoCommitError)
    assert issubclass(DiffUnavailable, GitError)
    assert issubclass(CommitFailed, GitError)
    for cls in (GenAuthError, GenQuotaError, GenUnavailable):
        assert issubclass(cls, LLMError)
    assert issubclass(LLMError, AutoCommitError)
    assert issubclass(SanitizeRejected, ValidationError)
    assert issubclass(NoApiKeyConfigured, ConfigError)
    assert issubclass(ConfigError, AutoCommitError)


def test_git_errors_carry_repo_path():
    d = DiffUnavailable("/work/repo", "fatal: bad object")
    c = CommitFailed("/work/repo")

    assert d.repo_path == "/work/repo"
    assert "/work/repo" in str(d)
    assert "fatal: bad object" in str(d)
    assert c.repo_path == "/work/repo"
    assert "commit failed" in str(c)
