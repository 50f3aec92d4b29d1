"""
Reload executors.

An executor takes a set of module identifiers and reports which were
reloaded, which failed (with the error) and which were skipped. The
engine never calls one directly; the registry's reload effect does.
"""

import importlib
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Set

from inscribe.logging_config import logger


@dataclass
class ReloadOutcome:
    reloaded: Set[str] = field(default_factory=set)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class ReloadExecutor:
    """
    Named reload strategy.

    Attributes:
        type: Short name reported in reload results
        reload_fn: Takes a set of identifiers, returns a ReloadOutcome
    """
    type: str
    reload_fn: Callable[[Set[str]], ReloadOutcome]


def execute(executor: ReloadExecutor, modules: Iterable[str]) -> ReloadOutcome:
    """
    Run a reload with the given executor.

    An executor that raises reports every module as skipped, with the
    error filed under the executor's type.
    """
    modules = set(modules)
    try:
        outcome = executor.reload_fn(modules)
    except Exception as e:
        logger.error(f"Reload executor '{executor.type}' failed: {e}")
        return ReloadOutcome(failed={executor.type: str(e)}, skipped=modules)

    logger.info(
        f"Reload via '{executor.type}': {len(outcome.reloaded)} reloaded, "
        f"{len(outcome.failed)} failed, {len(outcome.skipped)} skipped"
    )
    return outcome


def _noop(modules: Set[str]) -> ReloadOutcome:
    return ReloadOutcome(skipped=set(modules))


def _importlib_reload(modules: Set[str]) -> ReloadOutcome:
    outcome = ReloadOutcome()
    # finders cache directory listings; modules written since must be visible
    importlib.invalidate_caches()
    for name in sorted(modules):
        try:
            module = sys.modules.get(name)
            if module is None:
                importlib.import_module(name)
            else:
                importlib.reload(module)
        except Exception as e:
            logger.warning(f"Failed to reload {name}: {e}")
            outcome.failed[name] = f"{type(e).__name__}: {e}"
        else:
            outcome.reloaded.add(name)
    return outcome


NOOP = ReloadExecutor(type="noop", reload_fn=_noop)
"""Track pending reloads but never reload (manual control, CI)."""

IMPORTLIB = ReloadExecutor(type="importlib", reload_fn=_importlib_reload)
"""Reload Python modules one by one; no dependency ordering."""

PRESETS = {
    NOOP.type: NOOP,
    IMPORTLIB.type: IMPORTLIB,
}


def callable_executor(fn: Callable[[Set[str]], object], type: str = "callable") -> ReloadExecutor:
    """
    Adapt a plain callable into an executor.

    The callable is invoked once per module; a module whose call raises is
    reported as failed, every other one as reloaded.
    """
    def reload_fn(modules: Set[str]) -> ReloadOutcome:
        outcome = ReloadOutcome()
        for name in sorted(modules):
            try:
                fn(name)
            except Exception as e:
                outcome.failed[name] = str(e)
            else:
                outcome.reloaded.add(name)
        return outcome

    return ReloadExecutor(type=type, reload_fn=reload_fn)
