"""
models/ - Domain Models
========================
Plain dataclasses for frequencies, obligations, buckets, plans, accounts
and activity log entries.
"""
