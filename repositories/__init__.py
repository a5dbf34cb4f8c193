"""
repositories/ - Data Access Layer
==================================
The backend REST client and the local key/value storage implementations.
Repositories return domain model objects or raw serialized strings; they
hold no business rules.
"""
