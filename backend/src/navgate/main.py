"""Boot entry point: discover plugins, run boot verification and report the outcome."""

from __future__ import annotations

import sys

from .core.exceptions import NavgateException
from .core.logging import get_logger, setup_logging
from .plugins.boot import PluginBootResult, PluginBootService

logger = get_logger("main")


def boot() -> PluginBootResult:
    """Configure logging and boot every discovered plugin.

    Boot-fatal errors propagate to the caller.
    """
    setup_logging()
    return PluginBootService().boot()


def main() -> int:
    try:
        result = boot()
    except NavgateException as e:
        logger.critical("Boot failed [%s]: %s", e.error_code, e.message, extra={"error_code": e.error_code})
        return 1

    for entry in result.quarantined:
        logger.warning("Quarantined %s: %s", entry.plugin_id, entry.error)
    for warning in result.warnings:
        logger.warning(warning)
    logger.info(
        "Boot succeeded: %d/%d plugins active, %d navigation contexts verified",
        len(result.active),
        result.total,
        result.validated_contexts,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
