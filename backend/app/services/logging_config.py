"""Structured logging configuration for the Joinery Estimator."""
import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional

# Parent of every pricing engine logger (formula, cabinet, quote, config)
PRICING_LOGGER = "joinery-pricing"

# Pricing records attach these through ``extra=``; request fields come from the middleware
_PRICING_FIELDS = ("quote_id", "joinery_item_id", "cabinet_id", "formula_kind", "formula")
_REQUEST_FIELDS = ("request_id", "http_method", "http_path", "http_status", "duration_ms")

# Template formulas are user text and can be arbitrarily long
MAX_LOGGED_FORMULA_CHARS = 200


def clip_formula(formula: Optional[str]) -> Optional[str]:
    if formula is None or len(formula) <= MAX_LOGGED_FORMULA_CHARS:
        return formula
    return f"{formula[:MAX_LOGGED_FORMULA_CHARS]}... ({len(formula)} chars)"


class JSONFormatter(logging.Formatter):
    """JSON structured log formatter for production."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        for field in _PRICING_FIELDS + _REQUEST_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)
        if "formula" in log_entry:
            log_entry["formula"] = clip_formula(log_entry["formula"])
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = True, pricing_level: Optional[str] = None):
    """
    Configure application logging.

    ``pricing_level`` overrides the level of the ``joinery-pricing`` loggers
    only, e.g. DEBUG to see one line per priced cabinet, or ERROR to silence
    formula warnings from a catalog with many broken templates.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root.handlers = [handler]

    pricing = logging.getLogger(PRICING_LOGGER)
    if pricing_level:
        pricing.setLevel(getattr(logging, pricing_level.upper(), logging.INFO))
    else:
        pricing.setLevel(logging.NOTSET)

    # Suppress noisy loggers
    for name in ["uvicorn.access", "httpcore", "httpx", "sqlalchemy.engine"]:
        logging.getLogger(name).setLevel(logging.WARNING)
