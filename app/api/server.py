import os

import uvicorn


def main():
    # API on http://HOST:PORT, MCP under /mcp
    uvicorn.run(
        "app.api.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").lower(),
    )


if __name__ == "__main__":
    main()
