"""
TAL templates for Python.

TAL templates are XML documents whose elements carry attributes in the TAL
namespace; the attribute values are TALES expressions evaluated against the
data passed to the template.
"""
from tal.tal_datatypes import Language, TALError, TemplateError, UnknownExpressionType
from tal.tal_language import TAL_NAMESPACE, TALLanguage
from tal.tal_output import HTMLOutput, Output, XMLOutput
from tal.tal_provider import DictProvider, Provider
from tal.tal_runtime import TAL, ExecutionResult, TemplateRunner
from tal.tal_tales import TALES, split
from tal.tal_template import Template

__version__ = "0.8.0"

__all__ = [
    "TAL",
    "TAL_NAMESPACE",
    "TALES",
    "TALError",
    "TALLanguage",
    "DictProvider",
    "ExecutionResult",
    "HTMLOutput",
    "Language",
    "Output",
    "Provider",
    "Template",
    "TemplateError",
    "TemplateRunner",
    "UnknownExpressionType",
    "XMLOutput",
    "split",
]
