"""
Core record models, validators and transformation stages.
"""
