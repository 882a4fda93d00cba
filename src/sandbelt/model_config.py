"""Model/credential-mode lookup for sandbox containers.

Resolved once per invocation and passed down explicitly, so the command
builder never reads the environment itself. Values come from Claude's
``~/.claude/settings.json`` ``env`` block; the process environment fills
in whatever the file does not set (missing file or empty field).
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sandbelt.logger import logger

CLAUDE_SETTINGS_PATH = Path.home() / ".claude" / "settings.json"
DEFAULT_AWS_REGION = "us-east-1"


@dataclass(frozen=True)
class ModelConfig:
    bedrock_enabled: bool = False
    aws_region: str = DEFAULT_AWS_REGION
    aws_profile: str | None = None
    model: str | None = None

    def container_env(self) -> dict[str, str]:
        """Environment variables to forward into a new session."""
        env: dict[str, str] = {}
        if self.bedrock_enabled:
            env["CLAUDE_CODE_USE_BEDROCK"] = "1"
            env["AWS_REGION"] = self.aws_region
            if self.aws_profile:
                env["AWS_PROFILE"] = self.aws_profile
        if self.model:
            env["ANTHROPIC_MODEL"] = self.model
        return env


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.debug("Failed to read Claude settings file", path=str(path), err=str(exc))
        return {}
    return data if isinstance(data, dict) else {}


def _first_set(*values: object) -> str | None:
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _is_truthy(value: str | None) -> bool:
    return value is not None and value.lower() not in ("0", "false", "no", "off")


def load_model_config(
    settings_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ModelConfig:
    """Build a :class:`ModelConfig` snapshot from the settings file and environment."""
    environ = os.environ if environ is None else environ
    data = _read_settings_file(settings_path or CLAUDE_SETTINGS_PATH)
    file_env = data.get("env") or {}
    if not isinstance(file_env, dict):
        file_env = {}

    api_provider_fallback = "1" if data.get("apiProvider") == "bedrock" else None
    bedrock = _first_set(
        file_env.get("CLAUDE_CODE_USE_BEDROCK"),
        api_provider_fallback,
        environ.get("CLAUDE_CODE_USE_BEDROCK"),
    )

    return ModelConfig(
        bedrock_enabled=_is_truthy(bedrock),
        aws_region=_first_set(file_env.get("AWS_REGION"), environ.get("AWS_REGION"))
        or DEFAULT_AWS_REGION,
        aws_profile=_first_set(file_env.get("AWS_PROFILE"), environ.get("AWS_PROFILE")),
        model=_first_set(file_env.get("ANTHROPIC_MODEL"), environ.get("ANTHROPIC_MODEL")),
    )
