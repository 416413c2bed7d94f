# log.py
'''
structlog setup shared by every module.

    configure_logging(verbosity)  -> None
    get_logger(name)              -> bound logger
'''

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(verbosity: int = 0) -> None:
  '''Console logging; INFO by default, DEBUG from ``-v`` on.'''
  level = logging.DEBUG if verbosity > 0 else logging.INFO

  structlog.configure(
    processors=[
      structlog.contextvars.merge_contextvars,
      structlog.processors.add_log_level,
      structlog.processors.TimeStamper(fmt='%H:%M:%S'),
      structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
      ),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
  )

  logging.basicConfig(format='%(message)s', stream=sys.stdout, level=level)
  # inotify chatter
  logging.getLogger('watchdog').setLevel(logging.WARNING)


def get_logger(name: str | None = None):
  return structlog.get_logger(name)
