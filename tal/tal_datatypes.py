"""
Defines the core data types shared by the TAL template engine.

This module provides the exception hierarchy, the capability probe used by
the TALES path walker, and the abstract base class every language plugin
implements.
"""

import collections.abc
import enum
import inspect
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

# =================================================================
# Errors
# =================================================================

class TALError(Exception):
    """Base class for every error raised by the template engine."""
    pass


class UnknownExpressionType(TALError):
    def __init__(self, type_name: str):
        super().__init__(f"unknown TALES type '{type_name}'")
        self.type_name = type_name


class TemplateError(TALError):
    """A structural problem with a template or one of its directives."""
    def __init__(self, message: str, line: Optional[int] = None, col: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.col = col


# =================================================================
# Path step capabilities
# =================================================================

class Step(enum.Enum):
    """How a single path atom can be applied to a value."""
    OPERATION = "operation"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    OPAQUE = "opaque"


# Plain data never exposes named operations, even though e.g. dict has `.keys`.
_PLAIN_TYPES = (str, bytes, bytearray, int, float, complex, bool, type(None),
                dict, list, tuple, set, frozenset)

_INDEX_RE = re.compile(r"0|-?[1-9][0-9]*")


def is_index(atom: str) -> bool:
    """True when atom is written as a plain integer literal."""
    return _INDEX_RE.fullmatch(atom) is not None


def has_operation(value: Any, atom: str) -> bool:
    # Classes are data here; their functions are not bound to anything.
    if isinstance(value, _PLAIN_TYPES + (type,)) or atom.startswith("_"):
        return False
    return hasattr(value, atom)


def takes_no_arguments(member: Callable) -> bool:
    """True when member can be called without any arguments."""
    try:
        signature = inspect.signature(member)
    except (TypeError, ValueError):
        # Some builtins carry no signature; assume they can be called bare.
        return True
    try:
        signature.bind()
    except TypeError:
        return False
    return True


def probe(value: Any, atom: str) -> Step:
    """Decide which capability of value the atom addresses."""
    if has_operation(value, atom):
        return Step.OPERATION
    if isinstance(value, collections.abc.Mapping):
        return Step.MAPPING
    if isinstance(value, collections.abc.Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return Step.SEQUENCE
    return Step.OPAQUE


# =================================================================
# Language plugins
# =================================================================

# (template, node, raw value, local context, global context) -> replacement nodes
DirectiveHandler = Callable[[Any, Any, str, Dict[str, Any], Dict[str, Any]], Sequence[Any]]


class Language(ABC):
    """Abstract base class for a TAL language plugin.

    A language governs one XML namespace. Its `tags` list is the order in
    which directives found on an element are handled, and `handler` maps a
    directive name to the callable that handles it.

    A handler returns the nodes that should stand where the element was:
      - ``[node]`` (the element itself first) leaves it in place,
      - ``[]`` removes it,
      - anything else replaces it with the returned nodes and strings.
    """

    @property
    @abstractmethod
    def namespace(self) -> str:
        pass

    @property
    @abstractmethod
    def tags(self) -> List[str]:
        pass

    @abstractmethod
    def handler(self, tag: str) -> DirectiveHandler:
        pass

    def __repr__(self):
        return f"<{type(self).__name__} {self.namespace}>"
