"""plusbridge CLI — Typer-based command-line interface.

Provides the ``plusbridge`` command for inspecting which bridge
capabilities the current host supports and the error taxonomy the
adapter layer reports. All output uses Rich for formatted terminal display.
"""
