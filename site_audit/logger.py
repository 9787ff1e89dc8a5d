"""Project-wide logging for **SiteAudit**.

One named logger, :data:`logger`, is shared by every module::

    from site_audit.logger import logger
    logger.info("Resolving sitemap %s", url)

Console output goes to *stderr* so that commands printing JSON on stdout
(``site-audit inventory``, ``site-audit config``) can be piped. An optional
rotating log file mirrors the console. :func:`init_logging` is what the CLI calls.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, TextIO, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "SiteAudit"
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


class _ConsoleHandler(logging.StreamHandler):
    """StreamHandler that writes to whatever ``sys.stderr`` is at emit time.

    Test runners and click's ``CliRunner`` swap the standard streams; binding the
    stream once at configure time would leave the handler on a closed file.
    """

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self) -> TextIO:  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, _value: TextIO) -> None:
        pass


def _file_handler(file: Path | str) -> RotatingFileHandler:
    path = Path(file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
    )


def _normalize_level(level: _LevelT) -> _LevelT:
    return level.upper() if isinstance(level, str) else level


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual level, case-insensitive (``"debug"`` works).
    log_file
        Rotating log file to add next to the console; *None* -> console only.
    log_format
        Format string shared by all handlers.
    replace_handlers
        *True* - drop existing handlers first; *False* - append.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(_normalize_level(level))

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [_ConsoleHandler()]
    if log_file is not None:
        handlers.append(_file_handler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    # keep records out of the root logger (and out of duplicate output)
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """CLI entry: replace handlers and apply *level*, *log_file* and *log_format*."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


# --------------------------------------------------------------------------- #
# Ready-to-use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging"]
