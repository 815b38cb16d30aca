"""Unified command-line interface for pantryscan.

Usage:
    pantryscan scan <image> [<image>...] [--enhance] [--commit]
    pantryscan parse-text <file|->
    pantryscan dictate "3 apples, a can of tomato soup"
    pantryscan serve [--host] [--port]
"""
