"""
The TALES expression evaluator.

An expression has the form ``[type:]body``. The type selects a handler from
the evaluator's registry and defaults to ``path``:

    path:/foo/bar/0/baz      follow keys, indices and operations
    string:Hello ${name}!    interpolate paths into a string
    not:foo                  boolean negation of another expression
    exists:foo/bar           whether a path resolves at all
    nocall:foo/render        a path whose last operation is not invoked

Every lookup that cannot be resolved yields None. The only hard failure is
an expression type with no registered handler.
"""
import logging
import re
from typing import Any, Callable, Dict, List, Optional

from tal.tal_datatypes import Step, UnknownExpressionType, is_index, probe, takes_no_arguments

logger = logging.getLogger(__name__)

_EXPRESSION_RE = re.compile(r"^\s*(?:(\w+):\s*)?(.*)", re.DOTALL)
_SPLIT_RE = re.compile(r"\s*;\s*")
_ALTERNATIVES_RE = re.compile(r"\s*\|\s*")
_BRACED_RE = re.compile(r"\$\{(.*?)\}")
_BARE_RE = re.compile(r"\$(\w*)")

# Stands in for an escaped ';;' while the rest of the string is split.
_ESCAPED_SEMICOLON = "\U00012345"

TypeHandler = Callable[..., Any]


def split(string: str) -> List[str]:
    """Split a directive argument list on ';', with ';;' as a literal ';'.

    >>> split("foo; bar; baz;; narf")
    ['foo', 'bar', 'baz; narf']
    """
    escaped = string.replace(";;", _ESCAPED_SEMICOLON)
    parts = (p.strip() for p in _SPLIT_RE.split(escaped))
    return [p.replace(_ESCAPED_SEMICOLON, ";") for p in parts if p]


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


class TALES:
    """Evaluates TALES expressions against an ordered list of contexts.

    Contexts are searched first to last, so callers pass the innermost
    scope first (the local context, then the global one).
    """

    def __init__(self):
        self.types: Dict[str, TypeHandler] = {}
        self.register_type("path", self.process_path)
        self.register_type("string", self.process_string)
        self.register_type("not", self.process_not)
        self.register_type("exists", self.process_exists)
        self.register_type("nocall", self.process_nocall)

    def register_type(self, name: str, handler: TypeHandler) -> None:
        """Adds (or replaces) the handler for expressions of type `name`."""
        self.types[name] = handler

    split = staticmethod(split)

    def value(self, expression: str, *contexts) -> Any:
        if not contexts:
            contexts = ({},)
        type_name, body = _EXPRESSION_RE.match(expression).groups()
        type_name = type_name or "path"
        handler = self.types.get(type_name)
        if handler is None:
            raise UnknownExpressionType(type_name)
        return handler(body, *contexts)

    # -----------------------------------------------------------------
    # Paths
    # -----------------------------------------------------------------

    def _step(self, current: Any, atom: str, call: bool = True) -> Any:
        match probe(current, atom):
            case Step.OPERATION:
                member = getattr(current, atom)
                if not call or not callable(member):
                    return member
                if not takes_no_arguments(member):
                    return None
                return member()
            case Step.MAPPING:
                return current.get(atom)
            case Step.SEQUENCE:
                if not is_index(atom):
                    return None
                try:
                    return current[int(atom)]
                except IndexError:
                    return None
            case _:
                return None

    def _walk(self, context: Any, alternative: str, call_last: bool = True) -> Any:
        if alternative.startswith("/"):
            alternative = alternative[1:]
        atoms = alternative.split("/")
        current = context
        for i, atom in enumerate(atoms):
            last = i == len(atoms) - 1
            current = self._step(current, atom, call=call_last or not last)
            if current is None:
                return None
        return current

    def _resolve(self, path: str, contexts, call_last: bool = True) -> Any:
        alternatives = _ALTERNATIVES_RE.split(path.strip())
        for context in contexts:
            for alternative in alternatives:
                found = self._walk(context, alternative, call_last)
                if found is not None:
                    return found
        logger.debug("path %r is undefined in %d context(s)", path, len(contexts))
        return None

    def process_path(self, path: str, *contexts) -> Any:
        """Follow `path` into the contexts; the first defined value wins.

        ``/foo/bar/0/baz`` maps, depending on what it meets on the way, to
        ``context['foo'].bar()[0]['baz']``.
        """
        return self._resolve(path, contexts)

    def process_nocall(self, path: str, *contexts) -> Any:
        return self._resolve(path, contexts, call_last=False)

    def process_exists(self, path: str, *contexts) -> bool:
        return self._resolve(path, contexts) is not None

    # -----------------------------------------------------------------
    # Strings and booleans
    # -----------------------------------------------------------------

    def process_string(self, string: str, *contexts) -> str:
        """Interpolate ``${expression}`` and ``$name`` placeholders.

        The braced form is substituted first, and the result is then scanned
        for the bare form, so a substituted value containing '$' is itself
        interpolated by the second pass.
        """
        string = _BRACED_RE.sub(lambda m: _stringify(self.value(m.group(1), *contexts)), string)
        string = _BARE_RE.sub(lambda m: _stringify(self.value(m.group(1), *contexts)), string)
        return string

    def process_not(self, expression: str, *contexts) -> bool:
        return not self.value(expression, *contexts)


def value(expression: str, *contexts) -> Any:
    """Evaluate `expression` with a default evaluator."""
    return _default.value(expression, *contexts)


_default = TALES()
