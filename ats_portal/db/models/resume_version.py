"""
Resume Version model: one saved resume, uploaded or generated.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ats_portal.db.base import Base


class ResumeVersion(Base):
    __tablename__ = "resume_versions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # Null for anonymous resumes

    parsed_text = Column(Text, nullable=False)
    structured_data = Column(JSON, nullable=True)  # ResumeDraft as submitted
    generated_resume = Column(JSON, nullable=True)
    creation_mode = Column(String, nullable=False, default="upload")  # "chat" | "form" | "upload"
    file_name = Column(String, nullable=True)
    file_type = Column(String, nullable=True)

    ats_score = Column(Integer, nullable=True)  # Standalone score, no job involved
    shareable_id = Column(String, unique=True, index=True, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    user = relationship("User", backref="resume_versions")
    ats_scores = relationship(
        "ATSScore",
        back_populates="resume_version",
        cascade="all, delete-orphan",
        order_by="ATSScore.id",
    )

    def __repr__(self):
        return f"<ResumeVersion(id={self.id}, user_id={self.user_id}, mode='{self.creation_mode}')>"
