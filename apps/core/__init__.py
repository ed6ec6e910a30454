"""
Core app: shared models, logging, error handling and DRF permissions.
"""
