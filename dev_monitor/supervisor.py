# supervisor.py
'''
Own the supervised server process.

    start()        : launch the command, forward its stdout/stderr
    stop()         : cancel forwarding, kill the process (no-op if none)
    restart(path)  : stop() then start(), one cycle at a time

Output is decoded as latin-1 so a chunk boundary in the middle of a
multi-byte UTF-8 sequence can never fail to decode; the bytes reach the
terminal unchanged.
'''

from __future__ import annotations

import asyncio
import sys
from typing import List, Optional, Sequence, TextIO

from .log import get_logger

log = get_logger(__name__)

CHUNK_SIZE = 4096


class LaunchError(RuntimeError):
  '''The server command could not be started.'''


class ProcessSupervisor:
  def __init__(
    self,
    command: Sequence[str],
    cwd: Optional[str] = None,
    out: Optional[TextIO] = None,
  ) -> None:
    if not command:
      raise ValueError('command must not be empty')
    self.command = list(command)
    self.cwd = cwd
    self._out = out
    self._process: Optional[asyncio.subprocess.Process] = None
    self._forwarders: List[asyncio.Task] = []
    self._cycle = asyncio.Lock()

  @property
  def out(self) -> TextIO:
    # resolved late so pytest's capsys swap is honoured
    return self._out if self._out is not None else sys.stdout

  @property
  def running(self) -> bool:
    return self._process is not None

  @property
  def pid(self) -> Optional[int]:
    return self._process.pid if self._process is not None else None

  # ---------- output --------------------------------------------------------
  def _write(self, data: bytes) -> None:
    self.out.write(data.decode('latin-1'))
    self.out.flush()

  async def _forward(self, stream: asyncio.StreamReader, name: str) -> None:
    try:
      while True:
        data = await stream.read(CHUNK_SIZE)
        if not data:
          return
        self._write(data)
    except OSError as exc:
      log.debug('output forwarding stopped', stream=name, error=str(exc))

  # ---------- lifecycle -----------------------------------------------------
  async def start(self) -> None:
    log.info('starting server ...', command=' '.join(self.command))
    try:
      proc = await asyncio.create_subprocess_exec(
        *self.command,
        cwd=self.cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
      )
    except OSError as exc:
      raise LaunchError(f'cannot start {self.command[0]!r}: {exc}') from exc

    self._process = proc
    self._forwarders = [
      asyncio.create_task(self._forward(proc.stdout, 'stdout')),
      asyncio.create_task(self._forward(proc.stderr, 'stderr')),
    ]

  async def stop(self) -> None:
    proc = self._process
    if proc is None:
      return
    log.info('stopping server ...', pid=proc.pid)

    forwarders, self._forwarders = self._forwarders, []
    for task in forwarders:
      task.cancel()
    await asyncio.gather(*forwarders, return_exceptions=True)

    if proc.returncode is None:
      try:
        proc.kill()
      except ProcessLookupError:
        pass   # exited on its own between the check and the kill
    await proc.wait()
    self._process = None

  async def restart(self, path: Optional[str] = None) -> None:
    '''Stop the running server (if any) and start a fresh one.'''
    async with self._cycle:
      log.debug('restart cycle', trigger=path)
      await self.stop()
      await self.start()
