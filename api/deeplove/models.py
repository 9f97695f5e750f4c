from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)

from .database import Base


class UserAccount(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    display_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    age = Column(Integer, nullable=True)
    occupation = Column(String, nullable=True)
    interests = Column(Text, nullable=True)  # JSON list
    relationship_goal = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    religion = Column(String, nullable=True)
    ethnicity = Column(String, nullable=True)
    height = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Criteria(Base):
    __tablename__ = "criteria"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    age_min = Column(Integer, nullable=False)
    age_max = Column(Integer, nullable=False)
    gender = Column(String, nullable=False, default="any")
    distance_km = Column(Integer, nullable=True)
    education = Column(String, nullable=True)
    occupation = Column(String, nullable=True)
    religion = Column(String, nullable=False, default="none")
    ethnicity = Column(String, nullable=False, default="none")
    hobbies = Column(Text, nullable=True)  # JSON list
    relationship_goal = Column(String, nullable=False, default="casual")
    height_cm = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (CheckConstraint("age_min <= age_max", name="ck_criteria_age_range"),)


class Swipe(Base):
    __tablename__ = "swipes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    to_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    direction = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("direction IN ('left', 'right')", name="ck_swipes_direction"),
        Index("idx_swipes_from_to", "from_id", "to_id"),
    )


class SwipeQuota(Base):
    __tablename__ = "swipe_quota"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    quota_date = Column(String, nullable=False)
    used_count = Column(Integer, nullable=False, default=0)


class Entitlement(Base):
    __tablename__ = "entitlement"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    is_pro = Column(Boolean, nullable=False, default=False)
    plan = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
