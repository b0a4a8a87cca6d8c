"""
A single TAL template and the node walker that processes it.

    template = Template('<p xmlns:tal="http://xml.zope.org/namespaces/tal"'
                        ' tal:content="title"/>')
    tree = template.process({'title': 'Hello'})

The template parses its source into an lxml tree, then walks the document
element depth first. On every element each registered language gets a chance
to handle the attributes in its namespace, in the order of `languages` and
then in the order of each language's `tags`.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

import lxml.etree as etree

from tal.tal_datatypes import Language, TemplateError
from tal.tal_language import TALLanguage
from tal.tal_tales import TALES
from tal.tal_tree import detach, is_element, node_name, replace, split_tag

logger = logging.getLogger(__name__)

xml_parser = etree.XMLParser(resolve_entities=False)


class Template:
    """An XML template plus the ordered list of languages applied to it.

    Every new template gets the TAL language. Further languages are added
    with `add_language`; a language appended later only sees an element if
    no earlier language removed or replaced it.
    """

    def __init__(self, source: Optional[str | bytes] = None, languages: Optional[Sequence[Any]] = None):
        self._source = source
        self._languages: List[Language] = []
        self.tales = TALES()
        if languages is None:
            self.add_language(TALLanguage)
        else:
            self.languages = languages

    @property
    def source(self) -> Optional[str | bytes]:
        return self._source

    @source.setter
    def source(self, source: str | bytes):
        self._source = source

    @property
    def languages(self) -> List[Language]:
        return self._languages

    @languages.setter
    def languages(self, languages: Sequence[Any]):
        self._languages = []
        self.add_language(*languages)

    def add_language(self, *languages: Any) -> "Template":
        """Append languages, given as instances or as classes to instantiate."""
        for language in languages:
            self._languages.append(language() if isinstance(language, type) else language)
        return self

    def parse(self) -> etree._ElementTree:
        source = self._source
        if source is None:
            raise TemplateError("template has no source")
        # lxml refuses str input that carries an encoding declaration.
        if isinstance(source, str) and source.lstrip().startswith("<?xml"):
            source = source.encode("utf-8")
        try:
            root = etree.fromstring(source, parser=xml_parser)
        except etree.XMLSyntaxError as e:
            line, col = e.position
            raise TemplateError(f"XML syntax error: {e.msg}", line=line, col=col) from e
        return root.getroottree()

    def process(self, data: Optional[Dict[str, Any]] = None) -> etree._ElementTree:
        """Process the template with `data` and return the resulting tree.

        `data` seeds the global context, which 'global' defines may extend.
        The caller's mapping itself is left untouched.
        """
        document = self.parse()
        root = document.getroot()
        global_context = dict(data or {})
        result = self.process_node(root, {}, global_context)
        if result and result[0] is root:
            return document

        elements = [n for n in result if not isinstance(n, str)]
        text = "".join(n for n in result if isinstance(n, str))
        if len(elements) != 1 or text.strip():
            raise TemplateError(
                f"the document element '{node_name(root)}' must be replaced by exactly one "
                f"element, got {len(elements)}", line=root.sourceline)
        return etree.ElementTree(elements[0])

    # -----------------------------------------------------------------
    # Node walker
    # -----------------------------------------------------------------

    def _pending_directives(self, node) -> Dict[str, Dict[str, str]]:
        """Directive attributes of node, as {namespace: {name: raw value}}."""
        namespaces = {language.namespace for language in self._languages}
        pending: Dict[str, Dict[str, str]] = {}
        for key, raw in node.attrib.items():
            ns, name = split_tag(key)
            if ns in namespaces:
                pending.setdefault(ns, {})[name] = raw
        return pending

    def process_node(self, node, local_context: Optional[Dict[str, Any]] = None,
                     global_context: Optional[Dict[str, Any]] = None) -> List[Any]:
        """Process `node` and its subtree in place.

        Returns the nodes now standing where `node` stood: ``[node]`` when it
        stays, ``[]`` when it was removed, or its replacement. A node without
        a parent (such as a fresh copy made by a directive) is never spliced
        anywhere; the caller places the returned nodes itself.
        """
        if not is_element(node):
            return [node]
        if global_context is None:
            global_context = {}
        # Bindings made on this element must not leak to its siblings.
        local_context = dict(local_context or {})

        pending = self._pending_directives(node)
        for language in self._languages:
            attrs = pending.get(language.namespace)
            if attrs is None:
                continue
            for tag in language.tags:
                if tag not in attrs:
                    continue
                raw = attrs.pop(tag)
                node.attrib.pop(f"{{{language.namespace}}}{tag}", None)
                logger.debug("%s:%s=%r on <%s> line %s", language.namespace, tag, raw,
                             node_name(node), node.sourceline)
                result = list(language.handler(tag)(self, node, raw, local_context, global_context))
                if not result:
                    detach(node)
                    return []
                if result[0] is not node:
                    replace(node, result)
                    return result
            if attrs:
                logger.warning("unhandled TAL attributes '%s' in namespace '%s' on element '%s' at line %s",
                               ",".join(attrs), language.namespace, node_name(node), node.sourceline)

        for child in list(node):
            self.process_node(child, dict(local_context), global_context)
        return [node]
