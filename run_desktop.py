#!/usr/bin/env python3
"""
Main entry point for the Courtside Match Clock desktop application.

This script launches the Tkinter-based scoreboard window.
"""
import logging

from courtclock.ui.tkinter_app import run_tkinter_app

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_tkinter_app()
