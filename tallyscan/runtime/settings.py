"""Runtime loader for assistant collaborator settings."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/tallyscan/config.toml")
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class AssistantSettings:
    """Which assistant collaborators to build, and how to reach them.

    Resolved once at the process edge and handed to the pipeline explicitly.
    """

    local_model_url: str | None = None
    local_model_timeout: float = 30.0
    use_on_device: bool = True
    openai_api_key: str | None = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_timeout: float = 60.0
    use_cloud: bool = True


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = config.get(name, {})
    return section if isinstance(section, Mapping) else {}


def load_assistant_settings(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AssistantSettings:
    """
    Load assistant settings from a TOML file.

    Expected layout::

        [on_device]
        url = "http://localhost:8002"
        timeout = 30
        enabled = true

        [cloud]
        model = "gpt-4o-mini"
        timeout = 60
        enabled = true

    The OpenAI API key comes from ``[cloud].api_key`` or, when unset, from the
    ``OPENAI_API_KEY`` environment variable.

    Args:
        config_path: Optional TOML path override. If None, uses ~/.config/tallyscan/config.toml.
        environ: Environment mapping, defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH.expanduser()
    config = _load_toml(path)

    on_device = _section(config, "on_device")
    cloud = _section(config, "cloud")

    return AssistantSettings(
        local_model_url=on_device.get("url") or None,
        local_model_timeout=float(on_device.get("timeout", AssistantSettings.local_model_timeout)),
        use_on_device=bool(on_device.get("enabled", True)),
        openai_api_key=cloud.get("api_key") or env.get("OPENAI_API_KEY") or None,
        openai_model=str(cloud.get("model", DEFAULT_OPENAI_MODEL)),
        openai_timeout=float(cloud.get("timeout", AssistantSettings.openai_timeout)),
        use_cloud=bool(cloud.get("enabled", True)),
    )
