#!/usr/bin/env python3
"""Project entry point. Bootstraps the router and starts the local web server."""

import logging
import os

from modules import build_core
from web.app import WebApp


def main() -> None:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    core = build_core()
    WebApp(core).run()


if __name__ == "__main__":
    main()
