"""
security/ - Access control decorators for bot handlers.
"""
