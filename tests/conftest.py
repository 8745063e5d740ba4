import os

import pytest

from modules.settings import resolve_settings
from modules.utils import CmdResult, write_text_atomic


class FakeRunner:
    """Records every argv and answers from a list of (matcher, result) rules.

    A rule matches when its tuple is a prefix of the argv, or when it is a
    callable returning True for the argv. Unmatched commands succeed.
    """

    def __init__(self, tools=("ufw",)):
        self.commands = []
        self.rules = []
        self.written = []
        self.tools = set(tools)

    def on(self, matcher, returncode=0, stdout="", stderr="", times=None):
        self.rules.append({"match": matcher, "rc": returncode, "out": stdout, "err": stderr, "times": times})
        return self

    def _matches(self, matcher, argv):
        if callable(matcher):
            return matcher(argv)
        return tuple(argv[: len(matcher)]) == tuple(matcher)

    def run(self, args, *, input=None, env=None):
        argv = tuple(str(a) for a in args)
        self.commands.append(argv)
        for rule in self.rules:
            if rule["times"] == 0:
                continue
            if self._matches(rule["match"], argv):
                if rule["times"] is not None:
                    rule["times"] -= 1
                return CmdResult(argv, rule["rc"], rule["out"], rule["err"])
        return CmdResult(argv, 0)

    def run_cmd(self, args, **kwargs):
        return self.run(args, **kwargs).check()

    def write_file(self, path, content, mode):
        self.written.append(str(path))
        return write_text_atomic(path, content, mode)

    def which(self, name):
        return f"/usr/sbin/{name}" if name in self.tools else None

    def ran(self, *prefix):
        return any(cmd[: len(prefix)] == prefix for cmd in self.commands)


@pytest.fixture(autouse=True)
def _log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTOODOO_LOG_DIR", str(tmp_path / "log"))
    for key in list(os.environ):
        if key.startswith("ODOO_"):
            monkeypatch.delenv(key)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = {
            "generate_password": False,
            "superadmin": "s3cret",
            "etc_dir": str(tmp_path / "etc"),
            "var_log_dir": str(tmp_path / "var" / "log"),
        }
        values.update(overrides)
        return resolve_settings(values, environ={})

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()
