import logging
import sys
import time

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "magic-code"


class UTCJsonFormatter(JsonFormatter):
    converter = time.gmtime


def build_formatter(env: str | None = None) -> UTCJsonFormatter:
    static_fields = {"service": SERVICE_NAME}
    if env:
        static_fields["env"] = env
    return UTCJsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        static_fields=static_fields,
    )


def setup_logging(level: str = "INFO", *, env: str | None = None) -> None:
    """One JSON stdout handler on the root logger; records carry service/env."""
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(env))
    root.addHandler(handler)

    # request lines from the mail relay client would repeat every delivery
    logging.getLogger("httpx").setLevel("WARNING")
