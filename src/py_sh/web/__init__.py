"""Browser-facing parse inspector for py-sh.

This package provides a Flask application that exposes the shell's
*parser* over HTTP.  It is an **optional** extra — install with::

    pip install py-sh[web]

The ``create_app`` factory in ``app.py`` serves two endpoints:

- ``GET /api/status`` — the prompt and capacity limits in effect.
- ``POST /api/parse`` — parse a line and return its command model.

Lines are never executed; the inspector only shows how the grammar
reads them.
"""
