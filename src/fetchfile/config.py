from __future__ import annotations

import logging
import os
import pickle
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

ENV_JSON_INDENT = "FETCHFILE_JSON_INDENT"
ENV_YAML_INDENT = "FETCHFILE_YAML_INDENT"
ENV_SORT_KEYS = "FETCHFILE_SORT_KEYS"
ENV_BINARY_PROTOCOL = "FETCHFILE_BINARY_PROTOCOL"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CodecOptions:
    """
    Formatting knobs shared by the codecs.

    - json_indent: indentation of pretty-printed JSON (default 2)
    - yaml_indent: indentation of the structured text format (default 2)
    - sort_keys: emit mapping keys sorted instead of in field order (default False)
    - binary_protocol: pickle protocol used by the binary format
    """

    json_indent: int = 2
    yaml_indent: int = 2
    sort_keys: bool = False
    binary_protocol: int = pickle.DEFAULT_PROTOCOL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CodecOptions":
        """Build options from FETCHFILE_* environment variables.

        Malformed values are logged and the default is kept.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            json_indent=_int_from(env, ENV_JSON_INDENT, defaults.json_indent, lo=0),
            yaml_indent=_int_from(env, ENV_YAML_INDENT, defaults.yaml_indent, lo=2),
            sort_keys=_bool_from(env, ENV_SORT_KEYS, defaults.sort_keys),
            binary_protocol=_int_from(
                env, ENV_BINARY_PROTOCOL, defaults.binary_protocol, lo=2, hi=pickle.HIGHEST_PROTOCOL
            ),
        )


def _int_from(env: Mapping[str, str], key: str, default: int, lo: int, hi: Optional[int] = None) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", key, raw)
        return default
    if value < lo or (hi is not None and value > hi):
        logger.warning("Ignoring %s=%r: out of range", key, raw)
        return default
    return value


def _bool_from(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    logger.warning("Ignoring %s=%r: expected a boolean", key, raw)
    return default
