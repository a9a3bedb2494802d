import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import jsonschema
import yaml

from ..errors import ConfigurationError

ENV_PREFIX = "FILTER_COMPOSER_"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "settings.yaml"
SCHEMA_PATH = Path(__file__).parent / "settings-schema.json"


@lru_cache(maxsize=None)
def _schema() -> dict[str, Any]:
    with SCHEMA_PATH.open("r") as file:
        return json.loads(file.read())


def _validate(state: Any, source: str) -> None:
    try:
        jsonschema.validate(state, _schema())
    except jsonschema.exceptions.ValidationError as e:
        raise ConfigurationError(f"{e.message}\n\nIn {source}") from e


class Configuration(object):
    """Settings of the filter composer.

    Every setting is kept as ``{"description": ..., "value": ...}``; attribute
    access returns the value. Layers are applied in order: bundled defaults,
    ``FILTER_COMPOSER_<KEY>`` environment variables, then user files passed
    to ``load``. Each layer is validated against the settings schema before
    any of it takes effect.
    """

    def __init__(self) -> None:
        object.__setattr__(self, "_settings", {})

    def load(self, filepath: Union[str, Path]) -> None:
        """Overlay the settings found in the YAML file ``filepath``.

        :raises ConfigurationError: If the file does not match the settings schema
        """
        with Path(filepath).open("r") as file:
            state = yaml.safe_load(file)
        _validate(state, f"file {filepath}")
        for key, setting in state.items():
            self._settings[key] = {**self._settings.get(key, {}), **setting}

    def load_from_env(self) -> None:
        """Overlay ``FILTER_COMPOSER_<KEY>`` environment variables, typed like the current value."""
        state = {}
        for key, setting in self._settings.items():
            raw = os.environ.get(ENV_PREFIX + key.upper())
            if raw is None:
                continue
            value: Any = raw
            if isinstance(setting["value"], int):
                try:
                    value = int(raw)
                except ValueError as e:
                    raise ConfigurationError(f"{ENV_PREFIX + key.upper()} must be an integer, got {raw!r}") from e
            state[key] = {**setting, "value": value}
        _validate(state, "environment")
        self._settings.update(state)

    def reset(self) -> None:
        """Drop every overlay and go back to the bundled defaults and the environment."""
        self._settings.clear()
        self.load(DEFAULT_CONFIG_PATH)
        self.load_from_env()

    def __getattr__(self, key: str) -> Any:
        try:
            return self._settings[key]["value"]
        except KeyError:
            raise AttributeError(f"Unknown setting: {key}") from None

    def __setattr__(self, key: str, value: Any) -> None:
        if key not in self._settings:
            raise AttributeError(f"Unknown setting: {key}")
        self._settings[key] = {**self._settings[key], "value": value}

    def get_description(self, key: str) -> Optional[str]:
        return self._settings.get(key, {}).get("description")

    def to_dict(self) -> dict[str, Any]:
        return {key: setting["value"] for key, setting in self._settings.items()}


config = Configuration()
config.reset()
