#!/usr/bin/env python
"""Flask front end that hands every request to the core router."""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, Response, request

from core.core import Core
from core.envelope import Request, ResponseEnvelope
from modules import build_core

logger = logging.getLogger("certopedia.web")

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def to_flask_response(envelope: ResponseEnvelope) -> Response:
    response = Response(envelope.body_bytes(), status=envelope.status_code)
    # Werkzeug adds a default Content-Type; envelopes without one keep none.
    del response.headers["Content-Type"]
    for name, value in envelope.headers.items():
        response.headers[name] = value
    return response


def create_app(core: Optional[Core] = None) -> Flask:
    core = core or build_core()
    app = Flask(__name__, static_folder=None)
    app.config["CORE"] = core

    @app.route("/", defaults={"path": ""}, methods=HTTP_METHODS)
    @app.route("/<path:path>", methods=HTTP_METHODS)
    def dispatch(path):
        envelope = core.dispatch(
            Request(
                method=request.method,
                path=request.path,
                query=request.args.to_dict(),
                headers=dict(request.headers),
            )
        )
        return to_flask_response(envelope)

    return app


class WebApp:
    def __init__(self, core: Optional[Core] = None) -> None:
        self.core = core or build_core()
        self.app = create_app(self.core)

    def run(self) -> None:
        settings = self.core.settings
        logger.info({"evt": "web_start", "host": settings.host, "port": settings.port})
        self.app.run(host=settings.host, port=settings.port, threaded=True)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    WebApp().run()
