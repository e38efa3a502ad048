#!/usr/bin/env python
"""
Run the media scraper API.

Run manually:
    python scripts/run_server.py --port 3001
"""
import argparse
import logging

import uvicorn

from media_scraper.app.core.config import get_settings


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Media scraper API server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3001)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    logging.getLogger("media_scraper").info("Starting media scraper on %s:%s", args.host, args.port)
    uvicorn.run("media_scraper.app.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
