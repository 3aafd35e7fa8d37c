# guid_sharder/infrastructure/output/writer.py

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

import yaml

from guid_sharder.application.exceptions import OutputWriteError
from guid_sharder.domain.schemas.shard import ShardResult

OUTPUT_FORMATS = ("json", "yaml")


def _as_document(result: ShardResult) -> Dict[str, Any]:
    # group_id is omitted when unset; seed stays even when empty.
    return result.model_dump(mode="json", exclude_none=True)


def render(result: ShardResult, fmt: str) -> str:
    """Serialise the result as indented JSON (trailing newline) or block-style YAML."""
    document = _as_document(result)
    if fmt == "json":
        return json.dumps(document, indent=2) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)
    raise OutputWriteError(f"output_format {fmt!r} is not valid: must be one of {list(OUTPUT_FORMATS)}")


def write_output(
    result: ShardResult,
    fmt: str,
    output_file: Optional[str] = None,
    stdout: TextIO = sys.stdout,
    stderr: TextIO = sys.stderr,
) -> None:
    """
    Render fully first, then write to output_file or stdout.
    A rendering failure therefore never leaves a partial file behind.
    """
    data = render(result, fmt)
    if not output_file:
        stdout.write(data)
        return
    try:
        Path(output_file).write_text(data, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"failed to write output to {output_file}: {e}") from e
    print(f"Output written to {output_file}", file=stderr)
