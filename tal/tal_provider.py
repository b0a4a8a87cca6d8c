"""
Template providers: where the engine gets templates from by name.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from tal.tal_datatypes import TemplateError
from tal.tal_template import Template


class Provider(ABC):
    @abstractmethod
    def get_template(self, name: str) -> Template:
        pass


class DictProvider(Provider):
    """Serves templates from an in-memory mapping of name to source."""

    def __init__(self, templates: Optional[Dict[str, str | bytes]] = None):
        self.templates: Dict[str, str | bytes] = dict(templates or {})

    def add(self, name: str, source: str | bytes) -> "DictProvider":
        self.templates[name] = source
        return self

    def get_template(self, name: str) -> Template:
        try:
            source = self.templates[name]
        except KeyError:
            raise TemplateError(f"no template named '{name}'")
        return Template(source)
