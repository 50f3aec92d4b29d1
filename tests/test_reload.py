"""
Tests for reload executors.
"""

import sys

import pytest

from inscribe.reload import IMPORTLIB, NOOP, PRESETS, ReloadExecutor, ReloadOutcome, callable_executor, execute


class TestExecute:
    """Tests for running executors."""

    def test_outcome_passes_through(self):
        executor = ReloadExecutor("fake", lambda mods: ReloadOutcome(reloaded=set(mods)))
        assert execute(executor, ["a", "b"]).reloaded == {"a", "b"}

    def test_raising_executor_skips_everything(self):
        def explode(mods):
            raise RuntimeError("boom")

        outcome = execute(ReloadExecutor("fake", explode), {"a", "b"})

        assert outcome.failed == {"fake": "boom"}
        assert outcome.skipped == {"a", "b"}
        assert outcome.reloaded == set()

    def test_noop(self):
        outcome = execute(NOOP, {"a"})
        assert outcome.skipped == {"a"}
        assert outcome.reloaded == set()

    def test_presets(self):
        assert PRESETS == {"noop": NOOP, "importlib": IMPORTLIB}


class TestCallableExecutor:
    def test_per_module_failures(self):
        executor = callable_executor(lambda name: 1 / 0 if name == "bad" else None)

        outcome = execute(executor, {"good", "bad"})

        assert executor.type == "callable"
        assert outcome.reloaded == {"good"}
        assert set(outcome.failed) == {"bad"}


class TestImportlibExecutor:
    """Reloading real Python modules."""

    MODULE = "inscribe_reload_probe"

    @pytest.fixture
    def probe_dir(self, tmp_path, monkeypatch):
        monkeypatch.syspath_prepend(str(tmp_path))
        yield tmp_path
        sys.modules.pop(self.MODULE, None)
        sys.modules.pop(self.MODULE + "_broken", None)

    def test_imports_then_reloads(self, probe_dir):
        source = probe_dir / f"{self.MODULE}.py"
        source.write_text("VALUE = 1\n")

        first = execute(IMPORTLIB, {self.MODULE})
        assert first.reloaded == {self.MODULE}
        assert sys.modules[self.MODULE].VALUE == 1

        source.write_text("VALUE = 22222\n")
        second = execute(IMPORTLIB, {self.MODULE})

        assert second.reloaded == {self.MODULE}
        assert sys.modules[self.MODULE].VALUE == 22222

    def test_broken_module_is_reported(self, probe_dir):
        name = self.MODULE + "_broken"
        (probe_dir / f"{name}.py").write_text("def broken(:\n")

        outcome = execute(IMPORTLIB, {name, "inscribe_no_such_module_xyz"})

        assert outcome.reloaded == set()
        assert outcome.failed[name].startswith("SyntaxError")
        assert outcome.failed["inscribe_no_such_module_xyz"].startswith("ModuleNotFoundError")
