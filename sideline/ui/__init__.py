"""
UI package for the Sideline Lineup application.

This package contains the Flask JSON API and the Tkinter desktop window.
The desktop window lives in ``sideline.ui.tkinter_app`` and is imported on
demand so the web server runs where Tk is not installed.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
