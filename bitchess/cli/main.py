from __future__ import annotations

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the bitchess HTTP API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    args = parser.parse_args()
    uvicorn.run(
        "bitchess.protocol.http.app:create_app", factory=True, host=args.host, port=args.port
    )


if __name__ == "__main__":
    main()
