"""Serve the coderag HTTP API."""

import os

import uvicorn


def main() -> None:
    port = int(os.getenv("CODE_RAG_HTTP_PORT", "9333"))
    uvicorn.run("coderag.web.app:app", host=os.getenv("CODE_RAG_HTTP_HOST", "127.0.0.1"), port=port)


if __name__ == "__main__":
    main()
