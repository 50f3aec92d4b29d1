"""Pending-reload tools."""
from typing import List, Optional

from inscribe.registry import DispatchContext, EffectRegistry


def register(mcp, registry: EffectRegistry, context: DispatchContext):
    @mcp.tool()
    def pending_modules() -> List[str]:
        """
        Modules changed by file tools and not yet reloaded.
        """
        return sorted(context.pending)

    @mcp.tool()
    def reload_pending(only: Optional[List[str]] = None) -> dict:
        """
        Reload pending modules with the configured executor.

        Args:
            only: Restrict to these modules (default: all pending)
        """
        args = {"only": set(only)} if only is not None else {}
        return registry.invoke("reload", args, context).to_dict()

    @mcp.tool()
    def clear_pending(only: Optional[List[str]] = None, all: bool = False) -> dict:
        """
        Drop modules from the pending set without reloading them.

        Args:
            only: Modules to drop
            all: Drop everything
        """
        args = {"all": all}
        if only is not None:
            args["only"] = set(only)
        return registry.invoke("clear-pending", args, context).to_dict()
