"""
The engine façade and the runner used by the command line.

    engine = TAL(provider=DictProvider({'page': source}))
    html = engine.process('page', {'title': 'Hello'})
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from tal.tal_datatypes import TALError, TemplateError, UnknownExpressionType
from tal.tal_output import HTMLOutput, Output
from tal.tal_provider import DictProvider, Provider
from tal.tal_template import Template

logger = logging.getLogger(__name__)


# ===================================================================
# 1. Engine
# ===================================================================

class TAL:
    """Composes a template provider, the node walker and an output renderer.

    `provider` and `output` may be given as instances or as classes. The
    defaults are an empty `DictProvider` and `HTMLOutput`; `charset` is
    handed to the output.
    """

    def __init__(self, provider: Any = None, output: Any = None, charset: Optional[str] = None):
        self.provider: Provider = self._instance(provider, DictProvider)
        self.output: Output = self._instance(output, HTMLOutput)
        if charset is not None:
            self.output.charset = charset

    @staticmethod
    def _instance(value, default):
        if value is None:
            return default()
        return value() if isinstance(value, type) else value

    def process(self, template: Template | str, data: Optional[Dict[str, Any]] = None) -> bytes:
        """Render `template` (a Template or a provider name) with `data`."""
        if isinstance(template, str):
            template = self.provider.get_template(template)
        elif not isinstance(template, Template):
            raise TypeError(f"can't understand object of type {type(template).__name__} as a template")
        return self.output.render(template.process(data))

    def process_string(self, source: str | bytes, data: Optional[Dict[str, Any]] = None) -> bytes:
        return self.process(Template(source), data)


# ===================================================================
# 2. Template Execution
# ===================================================================

Token = Dict[str, Any]

@dataclass
class ExecutionResult:
    """The structured result of rendering a template."""
    status: Literal['success', 'error']
    value: Optional[bytes] = None
    error_message: Optional[str] = None
    error_token: Optional[Token] = None

    def format_error(self) -> str:
        """Formats an error message with line and column if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.error_token and self.error_token.get('line'):
            line = self.error_token.get('line')
            col = self.error_token.get('col')
            col_info = f", col {col}" if col else ""
            context = self.error_token.get('context')
            msg = f"Error on line {line}{col_info}: {msg}"
            if context:
                msg = f"{msg}\n{context}"
        return msg


class TemplateRunner:
    """Renders template sources and reports failures as an ExecutionResult."""

    def __init__(self, engine: Optional[TAL] = None):
        self.engine = engine or TAL()

    def _source_context(self, source: str, line: int, col: Optional[int], radius: int = 2) -> str:
        lines = source.splitlines()
        if not line or line < 1 or line > len(lines):
            return ""
        start = max(1, line - radius)
        end = min(len(lines), line + radius)
        width = len(str(end))
        out = []
        for i in range(start, end + 1):
            prefix = ">" if i == line else " "
            ln = str(i).rjust(width)
            out.append(f"{prefix} {ln} | {lines[i - 1]}")
            if i == line and col:
                caret = " " * max(col - 1, 0)
                out.append(f"  {' ' * width} | {caret}^")
        return "\n".join(out)

    def _format_error(self, e: Exception, source: str) -> tuple[str, Optional[Token]]:
        match e:
            case UnknownExpressionType():
                msg = f"UnknownExpressionType: {e.type_name}"
            case TemplateError():
                msg = f"TemplateError: {e}"
            case _:
                msg = f"{type(e).__name__}: {e}"
        line = getattr(e, 'line', None)
        if not line:
            return msg, None
        col = getattr(e, 'col', None)
        return msg, {'line': line, 'col': col, 'context': self._source_context(source, line, col)}

    def handle_template(self, source: str | bytes, data: Optional[Dict[str, Any]] = None) -> ExecutionResult:
        text = source.decode('utf-8', errors='replace') if isinstance(source, bytes) else source
        try:
            rendered = self.engine.process_string(source, data)
        except TALError as e:
            logger.debug("rendering failed", exc_info=True)
            msg, token = self._format_error(e, text)
            return ExecutionResult(status='error', error_message=msg, error_token=token)
        except Exception as e:
            logger.debug("unexpected error while rendering", exc_info=True)
            msg, token = self._format_error(e, text)
            return ExecutionResult(status='error', error_message=msg, error_token=token)
        return ExecutionResult(status='success', value=rendered)
