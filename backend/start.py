"""
Start the SkyMind API server.
"""
import os
import sys
import logging
import argparse

import uvicorn

sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from shared.config import load_settings


def main():
    parser = argparse.ArgumentParser(description='SkyMind Weather API')
    parser.add_argument('--port', type=int, default=None, help='Port to listen on (overrides SKYMIND_PORT)')
    parser.add_argument('--host', default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument('--env-file', default=None, help='Path to a .env file')
    args = parser.parse_args()

    settings = load_settings(args.env_file)
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logger = logging.getLogger('SkyMind')

    port = args.port or settings.port
    logger.info(f"Starting SkyMind API on http://{args.host}:{port}")
    uvicorn.run("orchestrator.server:app", host=args.host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
