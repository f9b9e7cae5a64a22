import os
from typing import Any, Callable, Dict, Mapping, TypeVar

from dotenv import dotenv_values
from pydantic import BaseModel

from .env import Env

T = TypeVar("T", bound=BaseModel)


def load_env(default: type[Env], env_file: str | None = None, override: T | None = None) -> T:
    """
    Build settings from the process environment, then the dotenv file, then
    the explicitly set fields of ``override``. Later sources win.
    """
    types = default.types_map()

    values = _coerce(os.environ, types)

    env_file = env_file or ".env"
    if os.path.exists(env_file):
        values.update(_coerce(dotenv_values(dotenv_path=env_file), types))

    settings_type = default
    if override is not None:
        values.update(override.model_dump(exclude_unset=True, exclude_none=True))
        settings_type = type(override)

    return settings_type(**values)


def _coerce(
    source: Mapping[str, str | None],
    types: Dict[str, Callable[[str], Any]],
) -> Dict[str, Any]:
    return {
        name: types[name](value)
        for name, value in source.items()
        if name in types and value
    }
