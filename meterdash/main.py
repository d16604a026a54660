#!/usr/bin/env python3
"""
meterdash server entry point

Loads the YAML config and serves the session API the renderer talks to.
"""

import argparse
import logging

import uvicorn

from .core.config import load_config
from .server import create_app


def main():
    """Main entry point for meterdash server."""
    parser = argparse.ArgumentParser(description="meterdash server")
    parser.add_argument("-c", "--config", help="Path to YAML config")
    args = parser.parse_args()

    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, reload=False, access_log=False)


if __name__ == "__main__":
    main()
