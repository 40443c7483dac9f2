"""YAML configuration loading utilities."""

from pathlib import Path

import yaml

from polarity_bot.config.models import BotConfig


def load_config(path: Path | str) -> BotConfig:
    """Load configuration from YAML file.

    An empty file yields the defaults.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated BotConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    path = Path(path)
    with path.open() as f:
        raw = yaml.safe_load(f)

    return BotConfig.model_validate(raw or {})


def get_default_config_path() -> Path:
    """Get path to default config file.

    Uses `configs/default.yaml` of the source checkout when running from one,
    otherwise `configs/default.yaml` under the current working directory.
    """
    checkout = Path(__file__).parents[3] / "configs" / "default.yaml"
    if checkout.exists():
        return checkout
    return Path.cwd() / "configs" / "default.yaml"
