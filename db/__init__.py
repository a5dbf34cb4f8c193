"""
db/ - Database Layer
====================
PostgreSQL connection pool and schema for the optional database-backed
storage (STORAGE_BACKEND=postgres).
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
