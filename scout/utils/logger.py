"""Structured logging and per-run search logging."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a configured logger (creates handlers only once per name).

    Log lines go to stderr; stdout is reserved for the rendered report.
    """
    from scout.utils.config import settings

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    effective_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logger.setLevel(effective_level)

    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)

    # Optional file handler
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(logging.Formatter(fmt))
        logger.addHandler(fh)

    return logger


def log_search_run(
    query: str,
    languages: List[str],
    variant_count: int,
    degraded_variants: List[str],
    result_count: int,
    status_counts: Dict[str, int],
    elapsed_ms: float,
    path: Optional[str] = None,
) -> None:
    """Append a single run record to the JSONL run log.

    Does nothing when no path is given and ``RUN_LOG_FILE`` is unset.
    """
    from scout.utils.config import settings

    target = path if path is not None else settings.run_log_file
    if not target:
        return

    record = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "query": query,
        "languages": languages,
        "variant_count": variant_count,
        "degraded_variants": degraded_variants,
        "result_count": result_count,
        "extraction_status": status_counts,
        "elapsed_ms": round(elapsed_ms, 1),
    }

    out = Path(target)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")
