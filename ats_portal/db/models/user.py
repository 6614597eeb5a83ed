from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float
from sqlalchemy.sql import func
from ats_portal.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)  # Applicants may register without one
    role = Column(String, nullable=False, default="applicant", index=True)  # "hr" | "admin" | "applicant"
    company = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Score summary, rewritten in full by UserScoreAggregator
    average_score = Column(Integer, nullable=False, default=0)
    latest_score = Column(Integer, nullable=False, default=0)
    improvement = Column(Float, nullable=False, default=0.0)
    scores_updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
