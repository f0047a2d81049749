"""
Resume roast storage - normalizes AI resume analyses into validated, persisted records
"""
__version__ = "1.0.0"
