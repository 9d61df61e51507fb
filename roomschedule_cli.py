#!/usr/bin/env python3
"""
Convenience entry point for running roomschedule directly.

Usage: python roomschedule_cli.py [command] [options]
"""

from roomschedule.cli.app import app

if __name__ == "__main__":
    app()
