"""
Resume document model
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON, Float
from sqlalchemy.sql import func
from roast_storage.core.database import Base


class ResumeDocument(Base):
    """One analyzed resume, stored as a full JSON document"""

    __tablename__ = "resume_documents"

    id = Column(Integer, primary_key=True, index=True)
    resume_id = Column(String(64), nullable=False, unique=True, index=True)

    # Denormalised copies of document fields used by projections and aggregates
    original_file_name = Column(String(255), nullable=False)
    candidate_name = Column(String(255))
    overall_score = Column(Float, nullable=False, index=True)  # 0-100
    roast_level = Column(String(50), index=True)
    client_ip = Column(String(64), index=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    # Full ResumeRecord (camelCase keys)
    document = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
