"""
Shared helpers
Date handling, identifiers, money and validation utilities
"""
