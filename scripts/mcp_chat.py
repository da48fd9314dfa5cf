import asyncio
import os
import httpx

from pydantic_ai import Agent
from pydantic_ai.mcp import MCPServerStreamableHTTP
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.ollama import OllamaProvider

MCP_URL = os.getenv("MCP_URL", "http://localhost:8000/mcp/")

OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/v1")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1:8b")

INSTRUCTIONS = (
    "You are a helpdesk dispatcher assistant.\n"
    "Use the MCP tools to read and update tickets; never guess ids.\n"
    "To assign or change status/priority, call update_ticket with only the fields being changed.\n"
    "To see who is overloaded, call technician_workload_summary before suggesting an assignee.\n"
    "For one ticket's history, call get_ticket.\n"
    "If a tool returns an 'error' key, report it to the user instead of retrying blindly.\n"
    "Be concise and always cite the ticket_number."
)


def build_agent(http_client: httpx.AsyncClient, mcp_url: str = MCP_URL) -> Agent:
    server = MCPServerStreamableHTTP(mcp_url)
    model = OpenAIChatModel(
        model_name=OLLAMA_MODEL,
        provider=OllamaProvider(
            base_url=OLLAMA_BASE_URL,
            api_key="ollama",
            http_client=http_client,
        ),
    )
    return Agent(model, toolsets=[server], instructions=INSTRUCTIONS)


async def main():
    print(f"[MCP] {MCP_URL}")
    print(f"[OLLAMA] {OLLAMA_BASE_URL} | model={OLLAMA_MODEL}")
    print("Type 'exit' to quit.\n")

    http_client = httpx.AsyncClient(timeout=httpx.Timeout(connect=5, read=120, write=30, pool=5))
    agent = build_agent(http_client)

    try:
        async with agent:
            while True:
                user = input("You> ").strip()
                if user.lower() in {"exit", "quit"}:
                    break
                if not user:
                    continue
                result = await agent.run(user)
                print(f"Bot> {result.output}\n")
    finally:
        await http_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
