"""
Renderers that turn a processed template tree into bytes.
"""
from abc import ABC, abstractmethod

import lxml.etree as etree


class Output(ABC):
    """Base class for output renderers."""

    def __init__(self, charset: str = "utf-8"):
        self.charset = charset

    def _prepare(self, tree):
        # Processing leaves directive namespace declarations without users.
        etree.cleanup_namespaces(tree)
        return tree

    @abstractmethod
    def render(self, tree) -> bytes:
        pass


class XMLOutput(Output):
    """Well-formed XML, with an XML declaration naming the charset."""

    def render(self, tree) -> bytes:
        return etree.tostring(self._prepare(tree), encoding=self.charset, xml_declaration=True)


class HTMLOutput(Output):
    """HTML as written by lxml's html serializer (e.g. no self-closed <img/>)."""

    def render(self, tree) -> bytes:
        return etree.tostring(self._prepare(tree), encoding=self.charset, method="html")
