"""
utils/ - Shared helpers (logging, errors, formatting, dates).
"""
