import logging
import os
import sys
from pathlib import Path

from tal.tal_datatypes import TALError
from tal.tal_output import XMLOutput
from tal.tal_runtime import TAL, TemplateRunner
from tal.tal_serialize import deserialize

USAGE = "usage: talrun.py [--xml] TEMPLATE [DATA]"


def load_data(file_path: str) -> dict:
    """Read the template data file; its format follows the file extension."""
    data = deserialize(Path(file_path).read_bytes(), name=file_path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TALError(f"template data in {file_path} must be a mapping, not {type(data).__name__}")
    return data


def main(argv: list[str]) -> int:
    """Render a template file and print it; returns the exit status."""
    logging.basicConfig(
        level=logging.DEBUG if os.environ.get("TAL_DEBUG") else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    xml = "--xml" in argv
    args = [a for a in argv if a != "--xml"]
    if not args or len(args) > 2 or args[0].startswith("-"):
        print(USAGE, file=sys.stderr)
        return 2

    try:
        source = Path(args[0]).read_bytes()
        data = load_data(args[1]) if len(args) > 1 else {}
    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}", file=sys.stderr)
        return 1
    except TALError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    runner = TemplateRunner(TAL(output=XMLOutput) if xml else None)
    result = runner.handle_template(source, data)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        return 1
    sys.stdout.write(result.value.decode(runner.engine.output.charset))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
