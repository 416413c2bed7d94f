# controller.py
'''
Wire the watch registry, event classifier, debounce gate and supervisor
together and run them on one asyncio loop.

    Controller(cfg).run()  -> exit status

States: RUNNING until SIGINT (or request_terminate()), then TERMINATING.
Once terminating no further filesystem events are handled; the server is
stopped best-effort and run() returns 0.
'''

from __future__ import annotations

import asyncio
import enum
import os
import signal
from typing import Optional, Set

from .config import Config
from .debounce import DebounceGate
from .dev_watchdog import WatchRegistry
from .events import EventClassifier
from .log import get_logger
from .supervisor import LaunchError, ProcessSupervisor

log = get_logger(__name__)


class State(enum.Enum):
  RUNNING = 'running'
  TERMINATING = 'terminating'


class Controller:
  def __init__(
    self,
    cfg: Config,
    *,
    registry: Optional[WatchRegistry] = None,
    supervisor: Optional[ProcessSupervisor] = None,
    gate: Optional[DebounceGate] = None,
  ) -> None:
    self.cfg = cfg
    self.registry = registry if registry is not None else WatchRegistry()
    self.supervisor = (supervisor if supervisor is not None
                       else ProcessSupervisor(cfg.command, cwd=cfg.root))
    self.gate = gate if gate is not None else DebounceGate(cfg.delay_ms)
    self.classifier = EventClassifier(self.registry, self.gate, self.request_restart)
    self.state: Optional[State] = None
    self._terminate: Optional[asyncio.Event] = None
    self._restarts: Set[asyncio.Task] = set()

  # ---------- restart -------------------------------------------------------
  def request_restart(self, path: Optional[str] = None) -> bool:
    '''Restart the server unless the debounce gate holds it back.'''
    if self.state is not State.RUNNING or not self.gate.accept():
      return False
    if path is not None:
      log.info('file was modified', path=path)
    task = asyncio.get_running_loop().create_task(self._restart(path))
    self._restarts.add(task)
    task.add_done_callback(self._restarts.discard)
    return True

  async def _restart(self, path: Optional[str]) -> None:
    try:
      await self.supervisor.restart(path)
    except LaunchError as exc:
      # no retry; the next accepted save tries again
      log.error('server failed to start', error=str(exc))

  async def wait_restarts(self) -> None:
    while self._restarts:
      await asyncio.gather(*list(self._restarts), return_exceptions=True)

  # ---------- termination ---------------------------------------------------
  def request_terminate(self) -> None:
    if self.state is State.TERMINATING:
      return
    self.state = State.TERMINATING
    if self._terminate is not None:
      self._terminate.set()

  def _install_signal_handler(self, loop: asyncio.AbstractEventLoop) -> None:
    try:
      loop.add_signal_handler(signal.SIGINT, self.request_terminate)
    except NotImplementedError:   # Windows event loops
      signal.signal(
        signal.SIGINT,
        lambda *_: loop.call_soon_threadsafe(self.request_terminate),
      )

  def _remove_signal_handler(self, loop: asyncio.AbstractEventLoop) -> None:
    try:
      loop.remove_signal_handler(signal.SIGINT)
    except NotImplementedError:
      signal.signal(signal.SIGINT, signal.default_int_handler)

  # ---------- main loop -----------------------------------------------------
  async def run(self, install_signals: bool = True) -> int:
    loop = asyncio.get_running_loop()
    self._terminate = asyncio.Event()
    if self.state is State.TERMINATING:    # asked to stop before we began
      self._terminate.set()
    else:
      self.state = State.RUNNING
    if install_signals:
      self._install_signal_handler(loop)

    try:
      self.request_restart()
      root = self.cfg.watch_root
      if not os.path.isdir(root):
        log.warning('watch directory does not exist', path=root)
      self.registry.add(root)
      await self._dispatch_until_terminated()
    finally:
      if install_signals:
        self._remove_signal_handler(loop)
      await self._shutdown()
    return 0

  async def _dispatch_until_terminated(self) -> None:
    stop = asyncio.ensure_future(self._terminate.wait())
    try:
      while not self._terminate.is_set():
        get = asyncio.ensure_future(self.registry.get())
        done, _ = await asyncio.wait({get, stop}, return_when=asyncio.FIRST_COMPLETED)
        if stop in done:
          get.cancel()
          break
        self.classifier.handle_raw(get.result())
    finally:
      stop.cancel()

  async def _shutdown(self) -> None:
    self.state = State.TERMINATING
    self.registry.close()
    # let a restart already under way finish so its server gets stopped too
    await self.wait_restarts()
    await self.supervisor.stop()
    log.info('exiting...')
