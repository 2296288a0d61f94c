"""
JSON document I/O for the result store and catalog.

Writes go to a temporary file in the target directory and are renamed into
place, so readers never see a half-written document.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def write_json_atomic(path: Path, data: Any) -> None:
    """Write ``data`` as 2-space indented JSON, replacing ``path`` atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def read_json(path: Path) -> Any:
    """Parse the JSON document at ``path``.

    Raises:
        OSError: If the file cannot be read
        ValueError: If it is not valid JSON
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)
