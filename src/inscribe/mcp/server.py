"""FastMCP server setup and tool registration."""
from pathlib import Path
from typing import Optional

from fastmcp import FastMCP

from inscribe.audit import AuditLogger
from inscribe.config import build_registry_config, create_audit_storage, load_config
from inscribe.mutation import RegistryConfig
from inscribe.registry import DispatchContext, EffectRegistry

from .tools import editing, reload


def create_server(config: Optional[RegistryConfig] = None, audit: bool = False) -> FastMCP:
    """
    Create and configure the MCP server.

    Args:
        config: Registry configuration (loaded from inscribe.toml if omitted)
        audit: Record file effects in the configured audit log

    All tools share one dispatch context, so modules changed by the file
    tools accumulate in the pending set until reloaded or cleared.
    """
    data = load_config(Path(config.project_root) if config else None) or {}
    if config is None:
        config = build_registry_config(data)

    registry = EffectRegistry(config)
    if audit:
        audit_data = data.get("audit") or {}
        registry.add_observer(AuditLogger(
            create_audit_storage(data, Path(config.project_root)),
            content_limit=audit_data.get("content_limit", 1000),
            session_id=audit_data.get("session_id"),
        ))

    context = DispatchContext()
    mcp = FastMCP("inscribe")

    editing.register(mcp, registry, context)
    reload.register(mcp, registry, context)

    return mcp


def main():
    """Run the server over stdio."""
    create_server().run()
