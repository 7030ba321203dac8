import enum
import uuid

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    MODERATOR = "moderator"


class NewsStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED_TRUE = "verified_true"
    VERIFIED_FAKE = "verified_fake"


class Verdict(str, enum.Enum):
    TRUE = "true"
    FAKE = "fake"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile", back_populates="user", uselist=False)


class Profile(Base):
    __tablename__ = "profiles"

    # 1:1 with the authenticated user
    id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    full_name = Column(String, nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=UserRole.USER,
    )
    trust_score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="profile")
    reports = relationship("NewsReport", back_populates="reporter", foreign_keys="NewsReport.reported_by")
    verifications = relationship("Verification", back_populates="verifier")


class NewsReport(Base):
    __tablename__ = "news_reports"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(Text, nullable=True)
    reported_by = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    status = Column(
        Enum(NewsStatus, name="news_status", values_callable=_enum_values),
        nullable=False,
        default=NewsStatus.PENDING,
        index=True,
    )
    suspicion_score = Column(Integer, nullable=False, default=0)  # 0-100, set once
    final_verdict = Column(Enum(Verdict, name="verdict_type", values_callable=_enum_values), nullable=True)
    finalized_at = Column(DateTime(timezone=True), nullable=True)
    finalized_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    reporter = relationship("Profile", back_populates="reports", foreign_keys=[reported_by])
    finalizer = relationship("Profile", foreign_keys=[finalized_by])
    verifications = relationship(
        "Verification",
        back_populates="report",
        order_by="Verification.created_at",
    )

    @property
    def high_risk(self) -> bool:
        return (self.suspicion_score or 0) > 50


class Verification(Base):
    __tablename__ = "verifications"

    id = Column(String(36), primary_key=True, default=_new_id)
    news_id = Column(String(36), ForeignKey("news_reports.id"), nullable=False, index=True)
    verified_by = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    verdict = Column(Enum(Verdict, name="verdict_type", values_callable=_enum_values), nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    report = relationship("NewsReport", back_populates="verifications")
    verifier = relationship("Profile", back_populates="verifications")
