"""
Write the OpenAPI schema for the suite backend to interfaces/openapi.json.

Usage:
    python -m suite_api.generate_openapi [output_path]

The default output path is <container_root>/interfaces/openapi.json, where the
container root is the directory holding src/.
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

from .main import app, openapi_tags


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """Append every router tag description the generated schema is missing."""
    tags: List[Dict[str, Any]] = list(schema.get("tags") or [])
    listed = {t.get("name") for t in tags}
    tags.extend(t for t in openapi_tags if t["name"] not in listed)
    schema["tags"] = tags


def default_output_path() -> str:
    src_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    container_root = os.path.dirname(src_dir)
    return os.path.join(container_root, "interfaces", "openapi.json")


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Generate the OpenAPI schema file and return the written file path."""
    out_path = out_path or default_output_path()
    schema = app.openapi()
    _ensure_tags(schema)

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main() -> None:
    path = generate_openapi(sys.argv[1] if len(sys.argv) > 1 else None)
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()
