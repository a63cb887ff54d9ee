"""Configuration and secret storage for aac."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".aac"
CONFIG_FILE_NAME = "config.json"
SECRETS_FILE_NAME = "secrets.json"

DEFAULT_PROVIDER = "gemini"

DEFAULT_MODELS = {
    "gemini": {
        "model": "gemini-2.0-flash-001",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta",
        "api_key_env": "GEMINI_API_KEY",
        "secret_key": "aac.geminiApiKey",
    },
    "openai": {
        "model": "gpt-4.1-mini",
        "endpoint": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
        "secret_key": "aac.openaiApiKey",
    },
}

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_REQUEST_TIMEOUT = 60.0

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_PROMPT = """# 指示 git diffから、以下のルールで日本語のコミットメッセージを生成。
# ルール
- 役割: シニアエンジニア
- 件名: 【種類】概要 (50字以内を推奨。簡潔かつ内容が明確であれば、文字数に厳密にこだわる必要はない。)
- 空行: 件名と本文の間に必須
- 本文: 変更の背景や内容を記述。箇条書きの記号（・など）は不要。補足が必要な場合のみ簡潔に記述する。
- 種類: 【fix】, 【add】, 【update】, 【change】, 【clean】, 【disable】, 【remove】 から最も適切なものを選択し、**必ず角括弧と日本語の「種類」を組み合わせた形式で出力すること。**

# 重要な制約
- コミットメッセージのみを出力してください
- コードブロック記号（```、'''、`）は一切使用しないでください
- 「コミットメッセージ：」などの前置きも不要です
- マークダウン記号（#、**、*）も使用しないでください
- 説明文や補足説明は含めないでください

# 出力例
【fix】ユーザー認証時のエラーハンドリングを修正

nullチェック処理を追加
エラーメッセージの表示を改善"""


def _is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def config_home() -> Path:
    """Return the directory holding config.json and secrets.json."""
    override = os.environ.get("AAC_CONFIG_HOME")
    if override:
        return Path(override).expanduser().resolve(strict=False)
    return (Path.home() / CONFIG_DIR_NAME).resolve(strict=False)


def config_file_path() -> Path:
    return config_home() / CONFIG_FILE_NAME


def secrets_file_path() -> Path:
    return config_home() / SECRETS_FILE_NAME


class _JSONFile:
    """Small JSON object persisted to disk, reloaded on every access."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{self.path} must contain a JSON object")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
        )


class ConfigStore(_JSONFile):
    """Persisted user settings (auto-commit flag, prompt, provider)."""

    def __init__(self, path: Optional[Path] = None) -> None:
        super().__init__(path or config_file_path())

    def get(self, name: str, default: Any = None) -> Any:
        return self._read().get(name, default)

    def set(self, name: str, value: Any) -> None:
        data = self._read()
        data[name] = value
        self._write(data)


class SecretStore(_JSONFile):
    """API keys, stored apart from settings with owner-only permissions."""

    def __init__(self, path: Optional[Path] = None) -> None:
        super().__init__(path or secrets_file_path())

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return str(value) if value else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def _write(self, data: Dict[str, Any]) -> None:
        super()._write(data)
        try:
            os.chmod(self.path, 0o600)
        except OSError as exc:  # pragma: no cover - platform dependent
            logger.warning("cannot restrict permissions of %s: %s", self.path, exc)


@dataclass(frozen=True)
class GenerationConfig:
    """Snapshot of everything one generation/commit cycle needs."""

    api_key: str
    auto_commit_enabled: bool
    custom_prompt: str
    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_MODELS[DEFAULT_PROVIDER]["model"]
    endpoint: str = DEFAULT_MODELS[DEFAULT_PROVIDER]["endpoint"]
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for display; the API key is masked."""
        data = asdict(self)
        data["api_key"] = "***" if self.api_key else ""
        return data


def resolve_provider(config_store: ConfigStore) -> str:
    provider = os.environ.get("AAC_PROVIDER") or config_store.get(
        "provider", DEFAULT_PROVIDER
    )
    if provider not in DEFAULT_MODELS:
        raise ConfigError(
            f"Unsupported provider '{provider}'. "
            f"Choose one of: {', '.join(sorted(DEFAULT_MODELS))}"
        )
    return provider


def secret_key_for(provider: str) -> str:
    return DEFAULT_MODELS[provider]["secret_key"]


def resolve_api_key(provider: str, secret_store: SecretStore) -> str:
    """Environment variable first, then the secret store."""
    env_name = DEFAULT_MODELS[provider]["api_key_env"]
    from_env = os.environ.get(env_name, "").strip()
    if from_env:
        return from_env
    return (secret_store.get(secret_key_for(provider)) or "").strip()


def _request_timeout() -> float:
    timeout_env = os.environ.get("AAC_LLM_REQUEST_TIMEOUT")
    try:
        return float(timeout_env) if timeout_env else DEFAULT_REQUEST_TIMEOUT
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT


def stored_auto_commit(config_store: ConfigStore) -> bool:
    """The persisted flag, ignoring the AAC_AUTO_COMMIT override."""
    return _is_truthy(config_store.get("autoCommitEnabled", False))


def auto_commit_enabled(config_store: ConfigStore) -> bool:
    env_value = os.environ.get("AAC_AUTO_COMMIT")
    if env_value:
        return _is_truthy(env_value)
    return stored_auto_commit(config_store)


def custom_prompt(config_store: ConfigStore) -> str:
    prompt = config_store.get("customPrompt")
    return prompt if isinstance(prompt, str) and prompt.strip() else DEFAULT_PROMPT


def poll_interval(config_store: ConfigStore) -> float:
    try:
        return float(config_store.get("pollInterval", DEFAULT_POLL_INTERVAL))
    except (TypeError, ValueError):
        return DEFAULT_POLL_INTERVAL


def load_generation_config(
    config_store: Optional[ConfigStore] = None,
    secret_store: Optional[SecretStore] = None,
) -> GenerationConfig:
    """Build an immutable snapshot from env, config file and secrets."""

    config_store = config_store or ConfigStore()
    secret_store = secret_store or SecretStore()
    provider = resolve_provider(config_store)
    defaults = DEFAULT_MODELS[provider]

    # Only reuse a persisted model/endpoint when it belongs to this provider.
    same_provider = config_store.get("provider", DEFAULT_PROVIDER) == provider
    model = (
        os.environ.get("AAC_LLM_MODEL")
        or (config_store.get("model") if same_provider else None)
        or defaults["model"]
    )
    endpoint = (
        os.environ.get("AAC_LLM_ENDPOINT")
        or (config_store.get("endpoint") if same_provider else None)
        or defaults["endpoint"]
    )

    return GenerationConfig(
        api_key=resolve_api_key(provider, secret_store),
        auto_commit_enabled=auto_commit_enabled(config_store),
        custom_prompt=custom_prompt(config_store),
        provider=provider,
        model=str(model),
        endpoint=str(endpoint),
        request_timeout=_request_timeout(),
    )


def describe_provider(provider: str) -> str:
    meta = DEFAULT_MODELS.get(provider)
    if not meta:
        return provider
    return f"{provider} (default model: {meta['model']})"
