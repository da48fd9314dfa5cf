import httpx
import pytest
from pydantic_ai import Agent

MCPServerStreamableHTTP = pytest.importorskip("pydantic_ai.mcp").MCPServerStreamableHTTP

from scripts.mcp_chat import build_agent  # noqa: E402


def test_build_agent_points_at_mcp_endpoint():
    client = httpx.AsyncClient()
    agent = build_agent(client, mcp_url="http://helpdesk.test/mcp/")
    assert isinstance(agent, Agent)
    servers = [t for t in agent.toolsets if isinstance(t, MCPServerStreamableHTTP)]
    assert [s.url for s in servers] == ["http://helpdesk.test/mcp/"]
