"""
PostgreSQL access for the silver sink and audit trail.
"""
