"""
Vault Linter -- deterministic rule pipeline for Markdown notes.

Runs an ordered set of toggleable rules over a note, then turns the net
change into positional edits that can be applied to a live buffer in one
atomic batch.
"""

__version__ = "1.0.0"
__author__ = "Vault Linter Team"
