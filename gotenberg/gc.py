"""Removal of expired files and directories at the top level of a path."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from collections.abc import Iterable
from datetime import datetime


def _remove(path: str, info: os.stat_result) -> None:
    try:
        if stat.S_ISDIR(info.st_mode):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        pass


def garbage_collect(
    logger: logging.Logger | None,
    root_path: str,
    include_substr: Iterable[str],
    expiration_time: datetime,
) -> None:
    """Delete entries directly under ``root_path`` older than ``expiration_time``.

    An entry is deleted when its name contains one of ``include_substr`` or
    its path equals one of them. Raises :class:`OSError` on failure.
    """
    log = (logger or logging.getLogger("gotenberg")).getChild("gc")
    substrings = list(include_substr)
    cutoff = expiration_time.timestamp()

    root_info = os.lstat(root_path)
    if not stat.S_ISDIR(root_info.st_mode):
        return

    for name in sorted(os.listdir(root_path)):
        path = os.path.normpath(os.path.join(root_path, name))
        info = os.lstat(path)
        if info.st_mtime >= cutoff:
            continue
        if not any(substr in name or path == substr for substr in substrings):
            continue
        try:
            _remove(path, info)
        except OSError as err:
            raise OSError(f"garbage collect '{path}': {err}") from err
        log.debug("'%s' removed", path)