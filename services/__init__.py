"""
services/ - Business Logic Layer
=================================
Recurrence rules, annualization, the activity log and the per-domain
consumers (Life XP buckets, insurance plans, accounts, notes).
"""
