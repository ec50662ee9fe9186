"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for a specific domain entity.
Repositories receive raw data from the database and return domain model objects.

Every method accepts an optional `conn`. When given, the statement joins the
caller's transaction and the caller decides when to commit; otherwise the
repository commits its own short transaction.
"""
