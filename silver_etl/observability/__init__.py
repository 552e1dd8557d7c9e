"""
Logging, metrics and lineage for the silver pipeline.
"""
