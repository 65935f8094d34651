"""
Logging configuration using loguru.

Everything goes to stderr at the chosen level. With a log directory, two
files are added: ``barakah.log`` for the general log and ``audit.log`` for
audit records only. Audit records are the ones emitted through
``audit_logger`` (finalized calculations, payments, deletions) so a reviewer
can reconstruct what was saved without wading through debug output.
"""

import os
import sys

from loguru import logger

audit_logger = logger.bind(audit=True)

GENERAL_LOG = "barakah.log"
AUDIT_LOG = "audit.log"


def _is_audit(record) -> bool:
    return bool(record["extra"].get("audit"))


def setup_logging(
    level: str = "WARNING",
    log_dir: str | None = None,
    fmt: str = "<level>[{level.name}]</level> {message}",
    rotation: str = "10 MB",
    retention: str = "30 days",
) -> None:
    """
    Replace loguru's sinks with barakah's.

    Args:
        level: Minimum level for stderr and the general log file.
        log_dir: Directory for ``barakah.log`` and ``audit.log``. None logs to stderr only.
        fmt: Console format string.
        rotation: Size at which log files rotate.
        retention: How long rotated files are kept.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=fmt)
    if not log_dir:
        return

    log_dir = os.path.expanduser(log_dir)
    os.makedirs(log_dir, exist_ok=True)
    logger.add(
        os.path.join(log_dir, GENERAL_LOG),
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}",
        rotation=rotation,
        retention=retention,
    )
    # Audit records are kept whatever the console level is.
    logger.add(
        os.path.join(log_dir, AUDIT_LOG),
        level="INFO",
        filter=_is_audit,
        format="{time:YYYY-MM-DDTHH:mm:ssZ} | {message}",
        rotation=rotation,
        retention=retention,
    )
