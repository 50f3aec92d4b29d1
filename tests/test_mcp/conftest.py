"""Shared fixtures for MCP tests."""
import json

import pytest
import pytest_asyncio

from inscribe.mcp import create_server
from inscribe.mutation import RegistryConfig
from inscribe.reload import callable_executor


def unwrap_result(result):
    """
    Normalize FastMCP CallToolResult to plain Python data.

    Prefers structured_content (unwrapped if FastMCP wraps under 'result'),
    otherwise falls back to parsing text content when available.
    """
    structured = getattr(result, "structured_content", None)
    if structured is not None:
        if isinstance(structured, dict) and set(structured) == {"result"}:
            return structured["result"]
        return structured

    content = getattr(result, "content", None) or []
    texts = [getattr(block, "text", None) for block in content if getattr(block, "text", None)]
    if len(texts) == 1:
        text = texts[0]
        try:
            return json.loads(text)
        except ValueError:
            return text
    if texts:
        return texts

    return result


@pytest.fixture
def reloaded():
    """Modules passed to the test reload executor, in call order."""
    return []


@pytest.fixture
def mcp_server(temp_project, reloaded):
    """An MCP server rooted at temp_project with a recording reload executor."""
    config = RegistryConfig(
        project_root=str(temp_project),
        default_threshold=10,
        reload_executor=callable_executor(reloaded.append, type="recording"),
    )
    return create_server(config)


@pytest_asyncio.fixture
async def mcp_client(mcp_server):
    """Async FastMCP client connected to in-process server."""
    from fastmcp import Client

    client = Client(mcp_server)
    async with client:
        yield client
