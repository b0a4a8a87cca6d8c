"""
Tree editing helpers for lxml element trees.

lxml keeps character data in ``text`` and ``tail`` strings rather than in
separate nodes, so every structural edit has to move that text by hand. A
"node sequence" here is a list whose items are elements or plain strings;
strings are spliced in as character data.
"""
import copy
from typing import Any, List, Optional, Sequence, Tuple

import lxml.etree as etree

from tal.tal_datatypes import TemplateError

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


def split_tag(tag: str) -> Tuple[Optional[str], str]:
    """
    Split an ElementTree *tag* into its namespace and localname part, and return
    them as tuple of ``(ns, localname)``.
    """
    try:
        ns, name = tag.split("}", 1)
        ns = ns[1:]
    except ValueError:
        name = tag
        ns = None
    return ns, name


def is_element(node: Any) -> bool:
    # Comments, PIs and entities carry a factory function as their tag.
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def node_name(node) -> str:
    """The element name as written in the source, including its prefix."""
    _, name = split_tag(node.tag)
    return f"{node.prefix}:{name}" if node.prefix else name


def append_text(parent, previous, text: str) -> None:
    """Add text right after `previous`, or at the start of `parent`."""
    if previous is None:
        parent.text = (parent.text or "") + text
    else:
        previous.tail = (previous.tail or "") + text


def append_children(element, nodes: Sequence[Any]) -> None:
    previous = element[-1] if len(element) else None
    for item in nodes:
        if isinstance(item, str):
            append_text(element, previous, item)
            continue
        element.append(item)
        previous = item


def clear_children(element) -> None:
    element.text = None
    for child in list(element):
        element.remove(child)


def detach(node) -> None:
    """Remove `node` from its parent, leaving its tail text behind."""
    parent = node.getparent()
    if parent is None:
        return
    tail, node.tail = node.tail, None
    if tail:
        append_text(parent, node.getprevious(), tail)
    parent.remove(node)


def replace(node, nodes: Sequence[Any]) -> None:
    """Put the node sequence where `node` was, keeping `node`'s tail after it."""
    parent = node.getparent()
    if parent is None:
        return
    index = parent.index(node)
    previous = node.getprevious()
    tail, node.tail = node.tail, None
    parent.remove(node)
    for item in nodes:
        if isinstance(item, str):
            append_text(parent, previous, item)
            continue
        parent.insert(index, item)
        index += 1
        previous = item
    if tail:
        append_text(parent, previous, tail)


def fragment(value: Any) -> List[Any]:
    """Turn a value into a node sequence, parsing strings as XML content."""
    if is_element(value):
        return [copy.deepcopy(value)]
    if isinstance(value, (list, tuple)):
        nodes: List[Any] = []
        for item in value:
            nodes.extend(fragment(item))
        return nodes
    try:
        wrapper = etree.fromstring(f"<fragment>{value}</fragment>")
    except etree.XMLSyntaxError as e:
        raise TemplateError(f"structure value is not well-formed XML: {e.msg}") from e
    nodes = [wrapper.text] if wrapper.text else []
    nodes.extend(wrapper)
    return nodes
