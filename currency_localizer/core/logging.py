import json
import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Dict

lookup_key_ctx: ContextVar[str | None] = ContextVar("lookup_key", default=None)


class LookupKeyFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        key = lookup_key_ctx.get()
        record.lookup_key = key or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "lookup_key": getattr(record, "lookup_key", "-"),
        }
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def init_logging(debug: bool = False) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(LookupKeyFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
