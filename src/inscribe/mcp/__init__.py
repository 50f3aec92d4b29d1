"""MCP server exposing the file mutation effects as tools."""
from .server import create_server, main

__all__ = ["create_server", "main"]
