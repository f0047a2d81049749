"""
Database models
"""
from roast_storage.models.resume import ResumeDocument

__all__ = [
    "ResumeDocument",
]
