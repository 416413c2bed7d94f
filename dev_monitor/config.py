# config.py
'''
Runtime settings for one monitor session.

The defaults describe the layout the monitor assumes when started from a
project root: sources under ``lib/``, the server entry point at
``bin/main.py``.
'''

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

DEFAULT_WATCH_DIR = 'lib'
DEFAULT_ENTRY_POINT = os.path.join('bin', 'main.py')
DEFAULT_DELAY_MS = 500


def default_command(root: str | Path) -> List[str]:
  return [sys.executable, os.path.join(str(root), DEFAULT_ENTRY_POINT)]


class Config:
  def __init__(
    self,
    root: str | Path | None = None,
    watch_dir: str = DEFAULT_WATCH_DIR,
    command: Optional[Sequence[str]] = None,
    delay_ms: int = DEFAULT_DELAY_MS,
  ) -> None:
    self.root = os.path.abspath(str(root) if root is not None else os.getcwd())
    self.watch_dir = watch_dir
    self.command = list(command) if command else default_command(self.root)
    self.delay_ms = delay_ms

  @property
  def watch_root(self) -> str:
    return os.path.join(self.root, self.watch_dir)

  def __repr__(self) -> str:
    return (f'Config(root={self.root!r}, watch_dir={self.watch_dir!r}, '
            f'command={self.command!r}, delay_ms={self.delay_ms})')
