"""Pytest configuration and a fake host for the probe tests."""
import os

import pytest


class FakeHost:
    """
    In-memory stand-in for helpers.host.LocalHost.

    files     absolute paths that exist as files (parent directories are implied)
    dirs      extra directories that exist without files in them
    path      name -> resolved path for PATH lookups
    env       environment variables
    commands  tuple(cmd) -> (rc, stdout, stderr); anything else behaves like a missing binary
    """

    def __init__(self, files=(), dirs=(), path=None, env=None, commands=None):
        self.files = set(files)
        self.dirs = set(dirs)
        self.path = dict(path or {})
        self.env = dict(env or {})
        self.commands = {tuple(k): v for k, v in (commands or {}).items()}
        self.calls = []

    def _all_dirs(self):
        found = set(self.dirs)
        for p in self.files | self.dirs:
            parent = os.path.dirname(p)
            while parent and parent != os.path.dirname(parent):
                found.add(parent)
                parent = os.path.dirname(parent)
        return found

    def which(self, name):
        if name in self.path:
            return self.path[name]
        if os.path.isabs(name) and name in self.files:
            return name
        return None

    def is_file(self, path):
        return path in self.files

    def is_dir(self, path):
        return path in self._all_dirs()

    def list_dirs(self, path):
        prefix = path.rstrip(os.sep) + os.sep
        return sorted({
            d[len(prefix):].split(os.sep)[0]
            for d in self._all_dirs()
            if d.startswith(prefix)
        })

    def getenv(self, name):
        return self.env.get(name) or None

    def run(self, cmd):
        self.calls.append(tuple(cmd))
        return self.commands.get(tuple(cmd), (127, "", "FileNotFoundError: not installed"))


@pytest.fixture
def fake_host():
    return FakeHost
