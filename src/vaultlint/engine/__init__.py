"""
Lint engine -- orchestrator, diff, edit projection, batch runs, host seams.
"""
