# test_argparse.py
'''
Tests for dev_argparse.parse_argv and config.Config.

Two-space indent, single quotes everywhere.
'''

from __future__ import annotations

import os
import sys

import pytest

from dev_monitor.config import Config
from dev_monitor.dev_argparse import parse_argv


# ─────────────────────────────────────────────────────────────────────────────
# 1. parse_argv
# ─────────────────────────────────────────────────────────────────────────────
def test_defaults():
  args = parse_argv([])
  assert args.watch_dir == 'lib'
  assert args.delay == 500
  assert args.verbose == 0
  assert args.command == []


def test_options():
  args = parse_argv(['-w', 'src', '--delay', '250', '-vv'])
  assert (args.watch_dir, args.delay, args.verbose) == ('src', 250, 2)


def test_command_after_double_dash():
  args = parse_argv(['-w', 'src', '--', 'python', '-m', 'app', '--port', '8000'])
  assert args.command == ['python', '-m', 'app', '--port', '8000']


def test_negative_delay_rejected():
  with pytest.raises(SystemExit):
    parse_argv(['--delay', '-1'])


# ─────────────────────────────────────────────────────────────────────────────
# 2. Config
# ─────────────────────────────────────────────────────────────────────────────
def test_config_defaults(tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  cfg = Config()
  assert cfg.root == os.path.abspath(str(tmp_path))
  assert cfg.watch_root == os.path.join(cfg.root, 'lib')
  assert cfg.command == [sys.executable, os.path.join(cfg.root, 'bin', 'main.py')]
  assert cfg.delay_ms == 500


def test_config_custom_command(tmp_path):
  cfg = Config(root=tmp_path, watch_dir='src', command=('node', 'server.js'), delay_ms=100)
  assert cfg.command == ['node', 'server.js']
  assert cfg.watch_root == os.path.join(str(tmp_path), 'src')
  assert 'delay_ms=100' in repr(cfg)
