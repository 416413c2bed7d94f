# dev_watchdog.py
'''
Recursive directory watching on top of `watchdog`.

Install watchdog first:
    pip install watchdog

API
---
WatchRegistry()
    • add(path)       : watch *path* and, in the background, every directory
                        below it; returns False when nothing new was watched
    • remove(prefix)  : stop watching *prefix* and everything nested in it
    • get()           : await the next event that belongs to a watched directory
    • wait_idle()     : await the background directory walks
    • close()         : drop every watch and stop the observer thread

One recursive watchdog watch (a single inotify instance on Linux) covers
each top directory handed to add().  The registry keeps its own record of
which directories are watched, one Subscription per directory, and an event
is only handed out by get() while the directory it happened in is still
registered.  Directories created later are registered by calling add() on
them (see events.EventClassifier).

Events are handed from the observer thread to the event loop; every other
method must be called on the loop.
'''

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Dict, List, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from .log import get_logger

log = get_logger(__name__)


def _is_watchable(path: str) -> bool:
  return os.path.isdir(path) and not os.path.islink(path)


def _is_within(path: str, top: str) -> bool:
  '''True if *path* is *top* or lies below it (by path components).'''
  if path == top:
    return True
  top = top if top.endswith(os.sep) else top + os.sep
  return path.startswith(top)


def _list_children(path: str) -> List[str]:
  with os.scandir(path) as it:
    return [e.path for e in it if e.is_dir(follow_symlinks=False)]


class Subscription:
  '''One watched directory.'''

  def __init__(self, path: str) -> None:
    self.path = path
    self.active = True

  def __repr__(self) -> str:
    return f'Subscription({self.path!r}, active={self.active})'


class _Forwarder(FileSystemEventHandler):
  '''Hands events from the observer thread to the registry's loop.'''

  def __init__(self, registry: 'WatchRegistry') -> None:
    super().__init__()
    self._registry = registry

  def on_any_event(self, event: FileSystemEvent) -> None:  # type: ignore[override]
    loop = self._registry.loop
    if loop is None or loop.is_closed():
      return
    try:
      loop.call_soon_threadsafe(self._registry.events.put_nowait, event)
    except RuntimeError:          # loop closed between the check and the call
      pass


class WatchRegistry:
  def __init__(self, observer: Optional[Observer] = None) -> None:
    self._observer = observer if observer is not None else Observer()
    self._handler = _Forwarder(self)
    self._subs: Dict[str, Subscription] = {}
    self._roots: Dict[str, ObservedWatch] = {}
    self._pending: Set[asyncio.Task] = set()
    self._closed = False
    self.loop: Optional[asyncio.AbstractEventLoop] = None
    # raw events, in observer order; get() filters out unwatched directories
    self.events: asyncio.Queue[FileSystemEvent] = asyncio.Queue()

  # ---------- queries -------------------------------------------------------
  @property
  def paths(self) -> List[str]:
    return sorted(self._subs)

  @property
  def roots(self) -> List[str]:
    return sorted(self._roots)

  def __contains__(self, path: object) -> bool:
    return isinstance(path, (str, Path)) and os.path.abspath(path) in self._subs

  def __len__(self) -> int:
    return len(self._subs)

  def owner(self, event: FileSystemEvent) -> Optional[Subscription]:
    '''The active subscription *event* belongs to, if any.'''
    src = os.fsdecode(event.src_path)
    candidates = [os.path.dirname(src), src]
    dest = os.fsdecode(getattr(event, 'dest_path', '') or '')
    if dest:
      candidates.append(os.path.dirname(dest))
    for p in candidates:
      sub = self._subs.get(p)
      if sub is not None and sub.active:
        return sub
    return None

  async def get(self) -> FileSystemEvent:
    while True:
      event = await self.events.get()
      if self.owner(event) is not None:
        return event

  # ---------- add / remove --------------------------------------------------
  def add(self, path: str | Path) -> bool:
    path = os.path.abspath(os.fsdecode(path))
    if self._closed or path in self._subs or not _is_watchable(path):
      return False

    self._ensure_started()
    if not any(_is_within(path, root) for root in self._roots):
      try:
        self._watch_root(path)
      except OSError as exc:
        log.warning('cannot watch directory', path=path, error=str(exc))
        return False

    self._subs[path] = Subscription(path)
    log.debug('watching', path=path)

    task = self.loop.create_task(self._add_children(path))
    self._pending.add(task)
    task.add_done_callback(self._pending.discard)
    return True

  def _watch_root(self, path: str) -> None:
    watch = self._observer.schedule(self._handler, path, recursive=True)
    # the new watch covers any narrower one already in place
    for root in [r for r in self._roots if _is_within(r, path)]:
      self._unschedule(self._roots.pop(root), root)
    self._roots[path] = watch

  async def _add_children(self, path: str) -> None:
    try:
      children = await asyncio.to_thread(_list_children, path)
    except PermissionError as exc:
      log.warning('cannot list directory', path=path, error=str(exc))
      return
    except OSError as exc:        # vanished before we got to it
      log.debug('cannot list directory', path=path, error=str(exc))
      return
    if path not in self._subs:   # removed while we were listing
      return
    for child in children:
      self.add(child)

  def remove(self, prefix: str | Path) -> List[str]:
    prefix = os.path.abspath(os.fsdecode(prefix))
    gone = [p for p in self._subs if _is_within(p, prefix)]
    for p in gone:
      self._subs.pop(p).active = False
    for root in [r for r in self._roots if _is_within(r, prefix)]:
      self._unschedule(self._roots.pop(root), root)
    if gone:
      log.debug('unwatched', paths=gone)
    return gone

  # ---------- lifecycle -----------------------------------------------------
  def _ensure_started(self) -> None:
    if self.loop is None:
      self.loop = asyncio.get_running_loop()
    if not self._observer.is_alive():
      self._observer.start()

  def _unschedule(self, watch: ObservedWatch, path: str) -> None:
    try:
      self._observer.unschedule(watch)
    except KeyError:
      # observer already dropped it (stopped, or its directory went away)
      log.debug('watch already gone', path=path)

  async def wait_idle(self) -> None:
    '''Wait until every directory walk started by add() has finished.'''
    while self._pending:
      await asyncio.gather(*list(self._pending))

  def close(self) -> None:
    if self._closed:
      return
    self._closed = True
    for task in list(self._pending):
      task.cancel()
    for sub in self._subs.values():
      sub.active = False
    self._subs.clear()
    for root, watch in list(self._roots.items()):
      self._unschedule(watch, root)
    self._roots.clear()
    if self._observer.is_alive():
      self._observer.stop()
      self._observer.join()
