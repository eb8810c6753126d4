"""
Database Models — Read models for contract analytics

Tables:
- contracts: Uploaded contract documents (soft-deleted via deleted_at)
- analysis_results: One AI analysis run against a contract
- usage_logs: Append-only usage events keyed by action name
- user_activities: Append-only user activity events keyed by activity type

The web application owns these tables and their lifecycle. This service
only issues scoped read queries against them.
"""

from enum import Enum
from sqlalchemy import Column, String, Integer, Float, BigInteger, Numeric, DateTime, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from contract_analytics.core.db.postgres import Base


class AnalysisStatus(str, Enum):
    """Lifecycle states of an analysis run."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Contract(Base):
    """Uploaded contract document."""
    __tablename__ = "contracts"

    id = Column(String(255), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    organization_id = Column(String(255), nullable=True, index=True)

    file_name = Column(String(500), nullable=False)
    file_size = Column(BigInteger, nullable=True)  # bytes
    contract_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    deleted_at = Column(DateTime, nullable=True)

    analysis_results = relationship("AnalysisResult", back_populates="contract")

    __table_args__ = (
        Index('idx_contracts_user_created', 'user_id', 'created_at'),
    )


class AnalysisResult(Base):
    """
    One AI analysis run against a contract.

    Status moves PENDING -> PROCESSING -> COMPLETED | FAILED.
    """
    __tablename__ = "analysis_results"

    id = Column(String(255), primary_key=True)
    contract_id = Column(String(255), ForeignKey("contracts.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    organization_id = Column(String(255), nullable=True, index=True)

    status = Column(String(50), nullable=False, default=AnalysisStatus.PENDING.value, index=True)
    analysis_type = Column(String(100), nullable=True)

    processing_time = Column(Integer, nullable=True)  # milliseconds
    tokens_used = Column(Integer, nullable=True)
    estimated_cost = Column(Numeric(12, 6), nullable=True)  # USD
    confidence_score = Column(Float, nullable=True)
    high_risk_count = Column(Integer, nullable=True)
    critical_risk_count = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)

    contract = relationship("Contract", back_populates="analysis_results")

    __table_args__ = (
        Index('idx_analysis_user_created', 'user_id', 'created_at'),
        Index('idx_analysis_status_created', 'status', 'created_at'),
    )


class UsageLog(Base):
    """Append-only usage event (contract_upload, analysis_started, ...)."""
    __tablename__ = "usage_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    organization_id = Column(String(255), nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_usage_user_action_created', 'user_id', 'action', 'created_at'),
    )


class UserActivity(Base):
    """Append-only user activity event (contract_uploaded, contract_viewed, ...)."""
    __tablename__ = "user_activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    organization_id = Column(String(255), nullable=True, index=True)
    activity_type = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    activity_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_activity_user_type_created', 'user_id', 'activity_type', 'created_at'),
    )
