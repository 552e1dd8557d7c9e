"""
Bronze-to-silver cleaning and conformance pipeline for the CRM/ERP warehouse.
"""

__version__ = "0.1.0"
