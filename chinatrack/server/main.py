"""CLI argument parsing and uvicorn entry point."""

import argparse
import logging
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="ChinaTrack API Server")
    parser.add_argument("--host", default=os.getenv("CHINATRACK_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("CHINATRACK_PORT", "8000")))
    parser.add_argument("--config", default=None, help="Path to config.yaml (overrides CHINATRACK_CONFIG)")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s: %(name)s - %(message)s",
    )

    if args.config:
        os.environ["CHINATRACK_CONFIG"] = args.config

    # Imported after CHINATRACK_CONFIG is set; the module reads it at import time
    from .app import api

    uvicorn.run(api, host=args.host, port=args.port)
