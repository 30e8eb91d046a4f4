import json
import os
from typing import Any

from pydantic import BaseModel


def write_to_file(content: str, filename: str = "output.txt", output_dir: str = "output") -> str:
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, filename)
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(content)
    return filepath


def write_json(data: Any, filename: str, output_dir: str = "output") -> str:
    if isinstance(data, BaseModel):
        content = data.model_dump_json(indent=2)
    else:
        content = json.dumps(data, indent=2, default=str)
    return write_to_file(content, filename=filename, output_dir=output_dir)


def read_bytes(path: str | os.PathLike | None) -> bytes | None:
    if path is None:
        return None
    with open(path, "rb") as f:
        return f.read()
