"""Notes configuration, read from the project's .claude/notes.json."""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from cc_notes.errors import ConfigInvalid

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".claude"
CONFIG_FILE_NAME = "notes.json"

DEFAULT_NOTES_REF = "claude-conversations"
DEFAULT_MAX_EXCERPT_LENGTH = 5000
DEFAULT_MAX_PROMPTS = 2
DEFAULT_USER_EMOJI = "👤"
DEFAULT_ASSISTANT_EMOJI = "🤖"


@dataclass
class NotesConfig:
    """Controls how conversation notes are attached to commits."""

    enabled: bool = True
    max_excerpt_length: int = DEFAULT_MAX_EXCERPT_LENGTH
    max_prompts: int = DEFAULT_MAX_PROMPTS  # advisory, not enforced
    include_tool_output: bool = True
    notes_ref: str = DEFAULT_NOTES_REF
    exclude_patterns: list[str] = field(default_factory=list)
    user_emoji: str = DEFAULT_USER_EMOJI
    assistant_emoji: str = DEFAULT_ASSISTANT_EMOJI

    @classmethod
    def from_dict(cls, data: Any) -> "NotesConfig":
        """Build a config from decoded JSON, filling missing values with defaults.

        Raises ConfigInvalid if a present value has the wrong type.
        """
        if not isinstance(data, dict):
            raise ConfigInvalid("config must be a JSON object")

        known = {f.name for f in fields(cls)}
        config = cls(**{k: v for k, v in data.items() if k in known})

        if not isinstance(config.enabled, bool):
            raise ConfigInvalid("enabled must be a boolean")
        if not isinstance(config.include_tool_output, bool):
            raise ConfigInvalid("include_tool_output must be a boolean")
        if not isinstance(config.exclude_patterns, list) or not all(
            isinstance(p, str) for p in config.exclude_patterns
        ):
            raise ConfigInvalid("exclude_patterns must be a list of strings")
        for name in ("max_excerpt_length", "max_prompts"):
            value = getattr(config, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigInvalid(f"{name} must be an integer")
        for name in ("notes_ref", "user_emoji", "assistant_emoji"):
            if not isinstance(getattr(config, name), str):
                raise ConfigInvalid(f"{name} must be a string")

        # Zero and empty values mean "use the default"
        if not config.notes_ref:
            config.notes_ref = DEFAULT_NOTES_REF
        if config.max_excerpt_length <= 0:
            config.max_excerpt_length = DEFAULT_MAX_EXCERPT_LENGTH
        if config.max_prompts <= 0:
            config.max_prompts = DEFAULT_MAX_PROMPTS
        if not config.user_emoji:
            config.user_emoji = DEFAULT_USER_EMOJI
        if not config.assistant_emoji:
            config.assistant_emoji = DEFAULT_ASSISTANT_EMOJI
        config.exclude_patterns = [p for p in config.exclude_patterns if p]

        return config


def config_path(project_dir: str | Path) -> Path:
    return Path(project_dir) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_notes_config(project_dir: str | Path | None) -> NotesConfig:
    """Load the notes configuration for a project.

    A missing or malformed file yields the defaults; this never raises.
    """
    if not project_dir:
        return NotesConfig()

    path = config_path(project_dir)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return NotesConfig()
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.info("Ignoring unreadable notes config %s: %s", path, e)
        return NotesConfig()

    try:
        return NotesConfig.from_dict(data)
    except (ConfigInvalid, TypeError) as e:
        logger.info("Ignoring invalid notes config %s: %s", path, e)
        return NotesConfig()


def save_notes_config(project_dir: str | Path, config: NotesConfig) -> Path:
    """Write the configuration to .claude/notes.json, creating the directory."""
    path = config_path(project_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(config), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
