"""Estimation Logger for Costeo AI.

Provides highly visible, formatted logging for estimation runs with
distinctive visual markers that stand out in log streams.
"""

import json
import structlog
from typing import Dict, Any
from datetime import datetime, timezone

logger = structlog.get_logger()

# Visual markers for different log types
BANNER_WIDTH = 80
PIPELINE_BANNER_CHAR = "█"
STAGE_BANNER_CHAR = "─"


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _format_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format dictionary as pretty JSON string."""
    try:
        return json.dumps(data, indent=indent, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_estimation_start(request_id: str, source_chars: int, mode: str) -> None:
    """Log estimation start with prominent banner."""
    print("\n")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PIPELINE_BANNER_CHAR, "COSTEO AI ESTIMATION STARTED"))
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Request ID   : {request_id}")
    print(f"║ Timestamp    : {_timestamp()}")
    print(f"║ Source chars : {source_chars:,}")
    print(f"║ Mode         : {mode}")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "estimation_start_logged",
        request_id=request_id,
        source_chars=source_chars,
        mode=mode
    )


def log_condensation(request_id: str, chunk_count: int, summary_chars: int) -> None:
    """Log the result of condensing an oversized source."""
    print(STAGE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(STAGE_BANNER_CHAR, "SOURCE CONDENSED"))
    print(f"│ Request ID    : {request_id}")
    print(f"│ Chunks        : {chunk_count}")
    print(f"│ Summary chars : {summary_chars:,}")
    print(STAGE_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "condensation_logged",
        request_id=request_id,
        chunk_count=chunk_count,
        summary_chars=summary_chars
    )


def log_estimation_complete(
    request_id: str,
    totals: Dict[str, Any],
    duration_ms: int,
    tokens_used: int
) -> None:
    """Log estimation completion with the computed totals."""
    print("\n")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PIPELINE_BANNER_CHAR, "✓ ESTIMATION COMPLETED"))
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Request ID   : {request_id}")
    print(f"║ Timestamp    : {_timestamp()}")
    print(f"║ Duration     : {duration_ms:,} ms ({duration_ms / 1000:.2f}s)")
    print(f"║ Total Tokens : {tokens_used:,}")
    print("║ TOTALS:")
    for line in _format_json(totals).split('\n'):
        print(f"  {line}")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "estimation_complete_logged",
        request_id=request_id,
        duration_ms=duration_ms,
        tokens_used=tokens_used,
        total_production=totals.get("totalProduction")
    )


def log_estimation_failed(request_id: str, code: str, error: str) -> None:
    """Log estimation failure with details."""
    print("\n")
    print("!" * BANNER_WIDTH)
    print(_create_banner("!", "✗ ESTIMATION FAILED"))
    print("!" * BANNER_WIDTH)
    print(f"║ Request ID   : {request_id}")
    print(f"║ Timestamp    : {_timestamp()}")
    print(f"║ Code         : {code}")
    print(f"║ Error        : {error}")
    print("!" * BANNER_WIDTH)
    print("\n")

    logger.error(
        "estimation_failed_logged",
        request_id=request_id,
        code=code,
        error=error
    )
