"""
Core services -- settings, locale resolution, error taxonomy, live logging.
"""
