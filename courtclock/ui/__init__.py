"""
UI package for the Courtside Match Clock.

This package contains user interface implementations including
the Tkinter desktop scoreboard and the Flask web server. The Tkinter
module is imported lazily so headless installs without Tk can still
serve the web interface.
"""
from .web_app import create_app, run_web_app


def run_tkinter_app() -> None:
    from .tkinter_app import run_tkinter_app as _run
    _run()


__all__ = ["create_app", "run_web_app", "run_tkinter_app"]
