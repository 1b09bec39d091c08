from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Sequence, Union

from fastapi.responses import JSONResponse


# PUBLIC_INTERFACE
def success_envelope(data: Any, **extra: Any) -> Dict[str, Any]:
    """
    Build the standard success body for handler responses.

    Args:
        data: Payload; iterators are materialized into a list.
        extra: Additional top-level keys (total, page, per_page, ...).

    Returns:
        Dict with keys: success, data, plus any extras.
    """
    if data is not None and not isinstance(data, (list, dict, str, int, float, bool)):
        data = list(data)
    return {"success": True, "data": data, **extra}


# PUBLIC_INTERFACE
def error_envelope(message: str, data: Any = None, **extra: Any) -> Dict[str, Any]:
    """Build the standard failure body: success false, the error message and empty data."""
    return {"success": False, "error": message, "data": data, **extra}


# PUBLIC_INTERFACE
def method_not_allowed(allowed: Sequence[str]) -> JSONResponse:
    """405 envelope naming the methods the path does serve in its Allow header."""
    return JSONResponse(
        status_code=405,
        content=error_envelope("Method not allowed"),
        headers={"Allow": ", ".join(allowed)},
    )


def materialize(items: Union[Sequence[Any], Iterable[Any], None]) -> List[Any]:
    """Return `items` as a list; None becomes an empty list."""
    if items is None:
        return []
    return list(items) if not isinstance(items, list) else items


# PUBLIC_INTERFACE
def round_half_up(value: float, places: int = 0) -> float:
    """
    Round like a spreadsheet (and JavaScript's Math.round): halves go up.
    Python's round() uses banker's rounding, which would turn 2.5 into 2.
    """
    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def slugify(title: str) -> str:
    """Lowercase, collapse runs of non-alphanumerics into '-', trim leading/trailing dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower())
    return slug.strip("-")
