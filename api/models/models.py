from api.config import Base
from sqlalchemy import Column, String, JSON, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime


class StudyPlan(Base):
    __tablename__ = "study_plans"
    id = Column(String, primary_key=True, index=True)  # uuid
    owner = Column(String, index=True, nullable=False)
    topic = Column(String, nullable=False)
    difficulty = Column(String, nullable=False)
    roadmap = Column(JSON, nullable=False)  # list of {number, title, description, key_concepts}
    completed_weeks = Column(JSON, nullable=False, default=list)  # list[int]
    certificate = Column(JSON(none_as_null=True), nullable=True)  # Credential dump, write-once; NULL until issued
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    certificates = relationship("Certificate", backref="plan", cascade="all, delete-orphan")


class Certificate(Base):
    __tablename__ = "certificates"
    id = Column(String, primary_key=True, index=True)
    owner = Column(String, index=True, nullable=False)
    plan_id = Column(String, ForeignKey("study_plans.id"), index=True, nullable=False)
    holder_name = Column(String, nullable=False)
    course_name = Column(String, nullable=False)
    difficulty = Column(String, nullable=False)
    issue_date = Column(Date, nullable=False)
    signature = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
