from __future__ import annotations

import collections.abc
import json
import tomllib
from pathlib import PurePath
from typing import Any, Optional
from xml.parsers.expat import ExpatError

import xmltodict
import yaml

from tal.tal_datatypes import TALError

_EXTENSIONS = {
    '.json': 'json',
    '.yaml': 'yaml',
    '.yml': 'yaml',
    '.toml': 'toml',
    '.xml': 'xml',
}


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str, *, encoding: Optional[str] = None) -> str:
    if isinstance(data, (bytes, bytearray)):
        return data.decode(encoding or 'utf-8', errors='replace')
    return data


def _to_builtin(obj: Any) -> Any:
    # xmltodict hands back nested dict subclasses
    if isinstance(obj, list):
        return [_to_builtin(x) for x in obj]
    if isinstance(obj, collections.abc.Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    return obj


def detect_format(name: Optional[str] = None, data_hint: Optional[str] = None) -> Optional[str]:
    """
    Returns a canonical format name among: 'json', 'yaml', 'toml', 'xml'.
    Uses the file extension of `name` first; falls back to simple data sniffing.
    """
    if name:
        fmt = _EXTENSIONS.get(PurePath(name).suffix.lower())
        if fmt:
            return fmt
    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{') or s.startswith('['):
            return 'json'
        if s.startswith('<'):
            return 'xml'
        # YAML is the most forgiving of the rest
        return 'yaml'
    return None


# --------------------------
# Public API
# --------------------------

def deserialize(data: bytes | bytearray | str,
                *,
                fmt: Optional[str] = None,
                name: Optional[str] = None,
                encoding: Optional[str] = None) -> Any:
    """
    Convert template data (bytes/string) to plain Python structures.
    Supported fmt: 'json', 'yaml', 'toml', 'xml'.
    If fmt is None, uses the extension of `name`, then sniffing.
    """
    text = _norm_text(data, encoding=encoding)
    f = fmt or detect_format(name, text)
    try:
        if f == 'json':
            return json.loads(text)
        if f == 'yaml':
            return yaml.safe_load(text)
        if f == 'toml':
            return tomllib.loads(text)
        if f == 'xml':
            return _to_builtin(xmltodict.parse(text))
    except (ValueError, ExpatError, yaml.YAMLError) as e:
        raise TALError(f"cannot read {f} data{f' from {name}' if name else ''}: {e}") from e
    raise TALError(f"unsupported data format: {f!r}")


__all__ = [
    "deserialize",
    "detect_format",
]
