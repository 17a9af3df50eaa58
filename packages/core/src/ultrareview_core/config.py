import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "claude-sonnet-4-5-20250929",
    "branch": None,  # None = detect the repository's default branch
    "base": None,  # None = compare against the target branch
    "ultrathink": True,
    "thinking_budget": 10000,
    "max_tokens": 16000,
    "timeout": 300,  # seconds, wall clock for the single API call
    "context": [],  # extra files whose contents are appended to the prompt
    "output": "REQUESTED_CHANGES.md",
}


def load_config(config_path: str = ".ultrareview.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .ultrareview.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "context": list(DEFAULT_CONFIG["context"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["context"] = split_context_paths(config.get("context"))

    # Resolve credentials from environment variables
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

    return config


def split_context_paths(value) -> list[str]:
    """Normalise the ``context`` setting into a list of paths.

    Accepts the comma-separated form used on the command line as well as a
    YAML list. Blank entries are dropped.
    """
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(p).strip() for p in value if str(p).strip()]
