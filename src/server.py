"""uvicorn runner for the marketplace API.

Events are processed synchronously inside the web process, so one process
serves HTTP, WebSockets and notification fan-out.

Usage:
    python src/server.py
    python src/server.py --port 9000 --reload
"""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Marketplace API server")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    args = parser.parse_args()

    uvicorn.run(
        "app:app",
        app_dir=os.path.dirname(os.path.abspath(__file__)),
        host=args.host,
        port=args.port,
        reload=args.reload,
        # Live channels are process-local; more workers would split them
        workers=1,
        log_config=None,
    )


if __name__ == "__main__":
    main()
