"""Exception hierarchy for aac."""


class AutoCommitError(Exception):
    """Base exception for all aac errors."""


class GitError(AutoCommitError):
    """Raised when a git invocation fails."""


class DiffUnavailable(GitError):
    """The staged diff could not be read."""

    def __init__(self, repo_path, detail: str = "") -> None:
        self.repo_path = str(repo_path)
        self.detail = detail
        message = f"git diff --cached failed in {self.repo_path}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class CommitFailed(GitError):
    """git commit did not succeed."""

    def __init__(self, repo_path, detail: str = "") -> None:
        self.repo_path = str(repo_path)
        self.detail = detail
        message = f"git commit failed in {self.repo_path}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class LLMError(AutoCommitError):
    """Raised when the generation service fails."""


class GenAuthError(LLMError):
    """The provider rejected the API key."""


class GenQuotaError(LLMError):
    """The provider reported a quota or rate limit."""


class GenUnavailable(LLMError):
    """Any other generation failure (network, empty or malformed reply)."""


class ValidationError(AutoCommitError):
    """Raised when input or output fails validation."""


class SanitizeRejected(ValidationError):
    """The model output did not contain a usable commit message."""


class ConfigError(AutoCommitError):
    """Raised when configuration is missing or invalid."""


class NoApiKeyConfigured(ConfigError):
    """No API key is stored for the active provider."""
