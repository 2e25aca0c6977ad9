#!/usr/bin/env python3
"""
Entry point for running oscremap as a module.

Usage:
    python -m oscremap [--config PATH] [ADDRESS [VALUE]]
"""

from oscremap.cli import main

main()
