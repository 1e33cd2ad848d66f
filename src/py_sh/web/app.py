"""Flask application factory for the py-sh parse inspector.

The ``create_app`` function builds a shell (for its configuration and
parser) and returns a Flask app with two endpoints:

- ``GET /api/status`` — return the prompt and capacity limits.
- ``POST /api/parse`` — parse a line and return the model as JSON.
"""

from __future__ import annotations

from flask import Flask, Response, jsonify, request

from py_sh.config import ShellConfig
from py_sh.errors import ParseError
from py_sh.shell import Shell

_HTTP_BAD_REQUEST = 400


def create_app(config: ShellConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Shell settings whose limits the parser enforces.

    Returns:
        A configured Flask application ready to serve.

    """
    shell = Shell(config=config)

    app = Flask(__name__)

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the settings the parser runs with.

        Returns:
            JSON with ``prompt``, ``max_pipelines`` and ``max_stages``.

        """
        return jsonify(
            {
                "prompt": shell.config.prompt,
                "max_pipelines": shell.config.max_pipelines,
                "max_stages": shell.config.max_stages,
            }
        )

    @app.route("/api/parse", methods=["POST"])
    def parse_line() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Parse a line and return its command model.

        Expects JSON body: ``{"line": "..."}``

        Returns:
            JSON with a ``pipelines`` list, or an ``error`` field and
            HTTP 400 for a missing line or a rejected one.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("line"), str):
            return jsonify({"error": "Missing 'line' field"}), _HTTP_BAD_REQUEST

        try:
            model = shell.parse(data["line"])
        except ParseError as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST

        return jsonify(model.to_dict())

    return app


def main() -> None:
    """Run the inspector development server.

    This is the ``py-sh-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
