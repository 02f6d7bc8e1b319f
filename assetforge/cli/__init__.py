"""assetforge CLI — Typer-based command-line interface.

A thin front end over ``Environment``: look up assets, print their bodies,
and digest files. All output uses Rich for formatted terminal display.
"""
