import logging
from typing import Any, Optional

from ..errors import WebApplicationError

PACKAGE_LOGGER = "simplyrestful_client"

# Order is the order fields appear in a rendered line.
LOG_EXTRA_FIELDS = (
    "request_id",
    "operation",
    "method",
    "endpoint",
    "status",
    "error_type",
    "duration_ms",
    "media_type",
    "uri_template",
)


class LogfmtFormatter(logging.Formatter):
    """
    logfmt lines for the client's call and discovery events.

    Missing extras are skipped. A logged WebApplicationError contributes its
    HTTP status and reason when the record carries no status of its own, so
    `log.exception(...)` around a client call still shows what the API said.
    """

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")
            kv.extend(self._api_error_fields(record, record.exc_info[1]))

        return " ".join(kv)

    def _api_error_fields(
        self, record: logging.LogRecord, exc: Optional[BaseException]
    ) -> list[str]:
        if not isinstance(exc, WebApplicationError):
            return []
        fields = []
        if getattr(record, "status", None) is None:
            fields.append(f"status={exc.status}")
        if exc.reason:
            fields.append(f"reason={self._fmt_val(exc.reason)}")
        return fields

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        s = str(val)
        # Error causes carry the API's response body, which is often multi-line.
        s = s.replace("\\", "\\\\").replace("\n", "\\n")
        if not s or any(c in s for c in ' ="'):
            s = '"' + s.replace('"', '\\"') + '"'
        return s


def setup_logging(level: str = "INFO", logger_name: str = PACKAGE_LOGGER) -> None:
    """
    Send the client's records to stderr as logfmt.

    Only `logger_name` (the package logger by default) is configured, and it
    stops propagating, so the host application's root handlers are left alone.
    Pass "" to configure the root logger instead.
    """

    log = logging.getLogger(logger_name or None)
    # Avoid duplicate handlers if called twice
    for h in list(log.handlers):
        log.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    log.addHandler(handler)
    log.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger_name:
        log.propagate = False


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS", "PACKAGE_LOGGER"]
