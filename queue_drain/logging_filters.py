"""Logging setup and filters shared by the CLI entrypoints."""

from __future__ import annotations

import logging
import sys

from queue_drain.observability.redaction import redact_text

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")


class RedactSecretsFilter(logging.Filter):
    """Scrub receipt handles and credentials from formatted log messages.

    Records are rewritten in place so every handler sees the redacted text.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (filter)
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        redacted = redact_text(message, max_chars=0)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(level: str | int = logging.INFO, verbose: bool = False) -> None:
    """Configure root logging for a CLI run.

    Safe to call multiple times.
    """
    if verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for handler in logging.root.handlers:
        if not any(isinstance(f, RedactSecretsFilter) for f in handler.filters):
            handler.addFilter(RedactSecretsFilter())

    # SDK request logs are only useful when debugging.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
