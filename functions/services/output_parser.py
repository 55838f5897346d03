"""Decoding of oracle output for Costeo AI.

The oracle is asked for a JSON object but sometimes wraps it in commentary
or markdown fences. Decoding runs in two stages:

1. strict_decode: the whole text is a JSON object.
2. salvage_decode: the text between the first "{" and the last "}" is one.

If neither stage yields an object the output is malformed. Nothing here
retries the oracle.
"""

import json
from typing import Any, Dict, Optional

import structlog

from config.errors import OracleOutputMalformed

logger = structlog.get_logger(__name__)


def strict_decode(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode the whole text as a JSON object, or return None."""
    if not text:
        return None
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def salvage_decode(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode the span from the first "{" to the last "}", or return None."""
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return strict_decode(text[start:end + 1])


def decode_plan_output(text: Optional[str]) -> Dict[str, Any]:
    """Decode oracle output into a JSON object.

    Args:
        text: Raw oracle text.

    Returns:
        The decoded object.

    Raises:
        OracleOutputMalformed: If neither decoding stage yields an object.
    """
    decoded = strict_decode(text)
    if decoded is not None:
        return decoded

    decoded = salvage_decode(text)
    if decoded is not None:
        logger.warning("oracle_output_salvaged", raw_length=len(text or ""))
        return decoded

    logger.error("oracle_output_malformed", raw_length=len(text or ""), excerpt=(text or "")[:200])
    raise OracleOutputMalformed(text or "")
