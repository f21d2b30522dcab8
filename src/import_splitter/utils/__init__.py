"""
Utility Subpackage.

Console and logging helpers shared by the CLI and the library.
"""
