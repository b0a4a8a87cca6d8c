"""
The TAL language: the standard directives of the tal: namespace.

Directives are handled in this order on every element:

    define      bind names in the local (or global) context
    condition   drop the element unless an expression is true
    repeat      repeat the element once per item of a sequence
    content     replace the element's content
    replace     replace the whole element
    attributes  set or remove attributes
    omit-tag    keep the content but drop the element's own tags
"""
import copy
import re
from typing import Any, Dict, List, Tuple

from tal.tal_datatypes import DirectiveHandler, Language, TemplateError
from tal.tal_tales import split
from tal.tal_tree import XML_NAMESPACE, append_children, clear_children, fragment

TAL_NAMESPACE = "http://xml.zope.org/namespaces/tal"

_DEFINE_RE = re.compile(r"^(?:(local|global)\s+)?([\w-]+)\s+(.+)$", re.DOTALL)
_REPEAT_RE = re.compile(r"^([\w-]+)\s+(.+)$", re.DOTALL)
_CONTENT_RE = re.compile(r"^(?:(text|structure)\s+)?(.+)$", re.DOTALL)
_ATTRIBUTE_RE = re.compile(r"^([\w.:-]+)\s+(.+)$", re.DOTALL)


class RepeatItem:
    """Loop state published as ``repeat/<name>`` inside a tal:repeat."""

    def __init__(self, index: int, length: int):
        self._index = index
        self._length = length

    def index(self): return self._index
    def number(self): return self._index + 1
    def length(self): return self._length
    def start(self): return self._index == 0
    def end(self): return self._index == self._length - 1
    def even(self): return self._index % 2 == 0
    def odd(self): return self._index % 2 == 1

    def __repr__(self):
        return f"<RepeatItem {self._index + 1}/{self._length}>"


def _parse(pattern: re.Pattern, directive: str, value: str) -> Tuple:
    match = pattern.match(value.strip())
    if match is None:
        raise TemplateError(f"malformed tal:{directive} argument '{value}'")
    return match.groups()


class TALLanguage(Language):
    """Implements the tal: directives on top of the template's evaluator."""

    def __init__(self):
        self._handlers: Dict[str, DirectiveHandler] = {
            "define": self.process_define,
            "condition": self.process_condition,
            "repeat": self.process_repeat,
            "content": self.process_content,
            "replace": self.process_replace,
            "attributes": self.process_attributes,
            "omit-tag": self.process_omit_tag,
        }

    @property
    def namespace(self) -> str:
        return TAL_NAMESPACE

    @property
    def tags(self) -> List[str]:
        return list(self._handlers)

    def handler(self, tag: str) -> DirectiveHandler:
        return self._handlers[tag]

    def process_define(self, template, node, value, local_context, global_context):
        for definition in split(value):
            scope, name, expression = _parse(_DEFINE_RE, "define", definition)
            result = template.tales.value(expression, local_context, global_context)
            if scope == "global":
                global_context[name] = result
            else:
                local_context[name] = result
        return [node]

    def process_condition(self, template, node, value, local_context, global_context):
        if template.tales.value(value, local_context, global_context):
            return [node]
        return []

    def process_repeat(self, template, node, value, local_context, global_context):
        name, expression = _parse(_REPEAT_RE, "repeat", value)
        items = template.tales.value(expression, local_context, global_context)
        if not items:
            return []
        try:
            items = list(items)
        except TypeError as e:
            raise TemplateError(f"tal:repeat over '{expression}' needs a sequence, got {type(items).__name__}") from e
        repeat = dict(local_context.get("repeat") or {})

        results: List[Any] = []
        for index, item in enumerate(items):
            clone = copy.deepcopy(node)
            # The original tail follows the whole run of copies.
            clone.tail = None
            context = dict(local_context)
            context[name] = item
            context["repeat"] = {**repeat, name: RepeatItem(index, len(items))}
            results.extend(template.process_node(clone, context, global_context))
        return results

    def process_content(self, template, node, value, local_context, global_context):
        mode, expression = _parse(_CONTENT_RE, "content", value)
        result = template.tales.value(expression, local_context, global_context)
        clear_children(node)
        if result is None:
            return [node]
        if mode == "structure":
            append_children(node, fragment(result))
        else:
            node.text = str(result)
        return [node]

    def process_replace(self, template, node, value, local_context, global_context):
        mode, expression = _parse(_CONTENT_RE, "replace", value)
        result = template.tales.value(expression, local_context, global_context)
        if result is None:
            return []
        if mode == "structure":
            return fragment(result)
        return [str(result)]

    def _attribute_key(self, node, name: str) -> str:
        if ":" not in name:
            return name
        prefix, local = name.split(":", 1)
        uri = XML_NAMESPACE if prefix == "xml" else node.nsmap.get(prefix)
        if uri is None:
            raise TemplateError(f"unknown namespace prefix '{prefix}' in tal:attributes")
        return f"{{{uri}}}{local}"

    def process_attributes(self, template, node, value, local_context, global_context):
        for assignment in split(value):
            name, expression = _parse(_ATTRIBUTE_RE, "attributes", assignment)
            key = self._attribute_key(node, name)
            result = template.tales.value(expression, local_context, global_context)
            if result is None:
                node.attrib.pop(key, None)
            else:
                node.set(key, str(result))
        return [node]

    def process_omit_tag(self, template, node, value, local_context, global_context):
        if value.strip() and not template.tales.value(value, local_context, global_context):
            return [node]
        # The walker does not descend into replaced elements.
        for child in list(node):
            template.process_node(child, dict(local_context), global_context)
        nodes: List[Any] = [node.text] if node.text else []
        nodes.extend(node)
        node.text = None
        return nodes
