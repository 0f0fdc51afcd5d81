"""
Settings for registering and dispatching host functions.
"""

import collections.abc
import os
import sys
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

DEBUG_ENV_VAR = "HOSTCALL_DEBUG"


def _dbg(*parts, enabled: bool = False):
    if enabled or os.environ.get(DEBUG_ENV_VAR):
        try:
            print("[DBG]", *parts, file=sys.stderr)
        except Exception:
            pass


@dataclass
class HostcallConfig:
    # Highest number of script-visible parameters a host function may take.
    max_arity: int = 20
    # How bind_host spells method names: "kebab" (take-damage) or "snake".
    name_style: str = "kebab"
    debug: bool = False
    # Report exceptions escaping plain host functions as ErrorInNativeFunction.
    wrap_native_errors: bool = True

    def __post_init__(self):
        if self.name_style not in ("kebab", "snake"):
            raise ValueError(f"name_style must be 'kebab' or 'snake', not {self.name_style!r}")
        if isinstance(self.max_arity, bool) or not isinstance(self.max_arity, int) or self.max_arity < 0:
            raise ValueError(f"max_arity must be a non-negative int, not {self.max_arity!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'HostcallConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(map(str, unknown))}")
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, text: str) -> 'HostcallConfig':
        data = yaml.safe_load(text)
        if data is None:
            return cls()
        if not isinstance(data, collections.abc.Mapping):
            raise ValueError("config YAML must be a mapping")
        # Allow the settings to live under a top-level 'hostcall:' key.
        if set(data) == {"hostcall"} and isinstance(data["hostcall"], collections.abc.Mapping):
            data = data["hostcall"]
        return cls.from_mapping(data)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'HostcallConfig':
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, base: Optional['HostcallConfig'] = None) -> 'HostcallConfig':
        environ = os.environ if environ is None else environ
        cfg = replace(base) if base is not None else cls()
        flag = environ.get(DEBUG_ENV_VAR)
        if flag is not None:
            cfg.debug = flag.strip().lower() not in ("", "0", "false", "no", "off")
        return cfg

    def dbg(self, *parts):
        _dbg(*parts, enabled=self.debug)
