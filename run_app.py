#!/usr/bin/env python3
"""
Shopfront Backend Runner
========================

Usage:
    python run_app.py                    # API server with auto-reload
    python run_app.py --mode prod        # Production mode
    python run_app.py --mode worker      # Celery worker with the payment sweep beat
    python run_app.py --port 8001        # Custom port
"""

import argparse
import sys

def run_api(host: str, port: int, reload: bool):
    """Run the FastAPI application"""
    import uvicorn

    print(f"Starting Shopfront API on {host}:{port}")
    print(f"API Docs: http://{host}:{port}/api/docs")
    uvicorn.run(
        "shopfront.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )

def run_worker():
    """Run a Celery worker with an embedded beat scheduler"""
    from shopfront.core.celery_app import celery_app

    celery_app.worker_main(["worker", "--beat", "--loglevel=info", "-Q", "default,payments"])

def main():
    parser = argparse.ArgumentParser(
        description="Shopfront Backend Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        choices=["dev", "prod", "worker"],
        default="dev",
        help="What to run (default: dev)"
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")

    args = parser.parse_args()

    if args.mode == "worker":
        run_worker()
    else:
        reload = not args.no_reload and args.mode != "prod"
        run_api(args.host, args.port, reload)

    return 0

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nStopped")
        sys.exit(0)
