#!/usr/bin/env python3
"""
Local development server runner.

Runs the relay application with uvicorn.

Usage:
    python run_local.py
    python run_local.py --port 8000
    python run_local.py --reload  # Auto-reload on code changes
"""

import argparse
import shutil
import sys
from pathlib import Path

import uvicorn

project_root = Path(__file__).parent


def main():
    parser = argparse.ArgumentParser(
        description="Run the webhook relay locally with uvicorn"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level for uvicorn (default: info)"
    )

    args = parser.parse_args()

    env_file = project_root / ".env"
    if not env_file.exists():
        print("WARNING: .env file not found!")
        env_example = project_root / ".env.example"
        if env_example.exists():
            shutil.copy(env_example, env_file)
            print("Created .env from .env.example. Please edit it with your configuration.")
        else:
            print("ERROR: .env.example not found. Please create a .env file manually.")
            print("Required environment variables:")
            print("  - WEBHOOK_ENDPOINT")
            print("  - WEBHOOK_SECRET")
            sys.exit(1)

    print("=" * 60)
    print("Starting Sheet Webhook Relay (Local Development)")
    print("=" * 60)
    print(f"Notifications: http://{args.host}:{args.port}/notifications")
    print(f"Queue status:  http://{args.host}:{args.port}/queue")
    print(f"Health:        http://{args.host}:{args.port}/health")
    print("=" * 60)

    # Stay in project root so the .env file loads
    uvicorn.run(
        "sheethook.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        reload_dirs=[str(project_root / "src")] if args.reload else None
    )


if __name__ == "__main__":
    main()
