#!/usr/bin/env python3
"""
Main entry point for the Sideline Lineup desktop application.

This script launches the Tkinter-based desktop interface.
"""
import logging

from sideline.ui.tkinter_app import run_tkinter_app

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_tkinter_app()
