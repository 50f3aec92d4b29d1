"""
Effect registry: named file effects dispatched against a shared context.

The registry owns the pending-reload set (in a DispatchContext) so the
mutation engine itself stays free of shared mutable state.
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Type

from pydantic import BaseModel

from inscribe.exceptions import UnknownEffectError
from inscribe.logging_config import logger
from inscribe.mutation import MutationFacade, RegistryConfig
from inscribe.reload import execute
from inscribe.schemas import (
    AppendArgs,
    ClearPendingArgs,
    ClearPendingResult,
    InsertArgs,
    ReloadArgs,
    ReloadResult,
    ReplaceArgs,
    WriteArgs,
)

EFFECT_KEYS = ("write", "append", "insert", "replace", "read-meta", "reload", "clear-pending")
FILE_EFFECTS = frozenset({"write", "append", "insert", "replace", "read-meta"})

Observer = Callable[[str, Any, Any], None]


class DispatchContext:
    """
    Per-session state carried through dispatch: the pending-reload set.

    All access goes through a lock, so one context may be shared by
    threads dispatching concurrently.
    """

    def __init__(self, pending: Optional[Iterable[str]] = None):
        self._pending: Set[str] = set(pending or ())
        self._lock = threading.Lock()

    def add_pending(self, module: str) -> None:
        with self._lock:
            self._pending.add(module)

    def discard_pending(self, modules: Iterable[str]) -> None:
        with self._lock:
            self._pending.difference_update(modules)

    def clear_pending(self) -> Set[str]:
        with self._lock:
            cleared, self._pending = self._pending, set()
            return cleared

    @property
    def pending(self) -> Set[str]:
        """Snapshot of the modules awaiting reload."""
        with self._lock:
            return set(self._pending)


@dataclass(frozen=True)
class Effect:
    key: str
    description: str
    args_model: Optional[Type[BaseModel]]
    handler: Callable[[Any, DispatchContext], Any]


class EffectRegistry:
    """
    Registry of file effects.

    Example:
        registry = EffectRegistry(RegistryConfig(project_root="/project"))
        ctx = DispatchContext()
        registry.dispatch([("write", {"path": "src/app/core.clj",
                                      "content": "(ns app.core)\\n"})], ctx)
        ctx.pending  # {"app.core"}
    """

    def __init__(self, config: RegistryConfig, observers: Sequence[Observer] = ()):
        self.config = config
        self.facade = MutationFacade(config)
        self.observers: List[Observer] = list(observers)
        self._effects: Dict[str, Effect] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        facade = self.facade
        self.register(
            "write", "Replace entire file contents with metadata tracking", WriteArgs,
            lambda a, ctx: facade.write(a.path, a.content, a.create_parent_dirs, a.threshold, context=ctx),
        )
        self.register(
            "append", "Append content to end of file with metadata tracking", AppendArgs,
            lambda a, ctx: facade.append(
                a.path, a.content, a.threshold, create_parent_dirs=a.create_parent_dirs, context=ctx
            ),
        )
        self.register(
            "insert", "Insert content at specific location with metadata tracking", InsertArgs,
            lambda a, ctx: facade.insert(a.path, a.content, a.at, a.threshold, context=ctx),
        )
        self.register(
            "replace", "Find and replace within file with metadata tracking", ReplaceArgs,
            lambda a, ctx: facade.replace(a.path, a.find, a.replacement, a.all, a.threshold, context=ctx),
        )
        self.register(
            "read-meta", "Get file metadata without reading full content", None,
            lambda path, ctx: facade.read_meta(path),
        )
        self.register("reload", "Reload pending modules using configured executor", ReloadArgs, self._reload)
        self.register("clear-pending", "Clear modules from pending reload set", ClearPendingArgs, self._clear_pending)

    def register(
        self,
        key: str,
        description: str,
        args_model: Optional[Type[BaseModel]],
        handler: Callable[[Any, DispatchContext], Any],
    ) -> None:
        """Register (or override) an effect under key."""
        self._effects[key] = Effect(key, description, args_model, handler)

    def describe(self) -> Dict[str, str]:
        """Effect keys and their descriptions."""
        return {key: effect.description for key, effect in self._effects.items()}

    def add_observer(self, observer: Observer) -> None:
        self.observers.append(observer)

    def dispatch(
        self,
        effects: Iterable[Tuple[str, Any]],
        context: Optional[DispatchContext] = None,
    ) -> List[Any]:
        """
        Run effects in order.

        Args:
            effects: (key, args) pairs; args is a dict, the effect's args
                model, or a bare path string for read-meta
            context: Shared context (a fresh one is used if omitted)

        Returns:
            One result per effect

        Raises:
            UnknownEffectError: unregistered key
            pydantic.ValidationError: malformed arguments
            InscribeError: the effect's own failure; later effects do not run
        """
        ctx = context if context is not None else DispatchContext()
        return [self.invoke(key, args, ctx) for key, args in effects]

    def invoke(self, key: str, args: Any = None, context: Optional[DispatchContext] = None) -> Any:
        """Run a single effect and notify observers of its result."""
        effect = self._effects.get(key)
        if effect is None:
            raise UnknownEffectError(key)

        ctx = context if context is not None else DispatchContext()
        parsed = self._parse_args(effect, args)
        logger.debug(f"Dispatching '{key}'")
        result = effect.handler(parsed, ctx)
        self._notify(key, parsed, result)
        return result

    def _parse_args(self, effect: Effect, args: Any) -> Any:
        if effect.args_model is None:
            return args
        if isinstance(args, effect.args_model):
            return args
        return effect.args_model.model_validate(args or {})

    def _notify(self, key: str, args: Any, result: Any) -> None:
        for observer in self.observers:
            try:
                observer(key, args, result)
            except Exception as e:
                logger.error(f"Observer {observer!r} failed for '{key}': {e}")

    # ------------------------------------------------------------------
    # Reload effects
    # ------------------------------------------------------------------

    def _reload(self, args: ReloadArgs, ctx: DispatchContext) -> ReloadResult:
        executor = self.config.reload_executor
        pending = ctx.pending
        to_reload = pending & args.only if args.only is not None else pending

        if not to_reload:
            return ReloadResult(
                executor=executor.type if executor else None,
                pending_remaining=pending,
            )

        if executor is None:
            return ReloadResult(
                error="no-executor",
                message="No reload_executor configured in RegistryConfig",
                pending_remaining=pending,
            )

        outcome = execute(executor, to_reload)
        ctx.discard_pending(outcome.reloaded)
        return ReloadResult(
            executor=executor.type,
            requested=to_reload,
            reloaded=outcome.reloaded,
            failed=outcome.failed,
            skipped=outcome.skipped,
            pending_remaining=ctx.pending,
        )

    def _clear_pending(self, args: ClearPendingArgs, ctx: DispatchContext) -> ClearPendingResult:
        if args.all:
            return ClearPendingResult(cleared=ctx.clear_pending(), remaining=set())

        if args.only is not None:
            to_clear = ctx.pending & args.only
            ctx.discard_pending(to_clear)
            return ClearPendingResult(cleared=to_clear, remaining=ctx.pending)

        return ClearPendingResult(cleared=set(), remaining=ctx.pending)
