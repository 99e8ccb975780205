"""
Command-Line Interface Layer.

This package defines the Typer application and the Rich formatters used to
display registry contents.
"""
