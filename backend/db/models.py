from datetime import datetime
from sqlalchemy import (
    Column, Text, Float, ForeignKey, Index,
    DateTime,
)
from sqlalchemy.orm import relationship
from db.database import Base


MEAL_TYPES = ("NoMeal", "Breakfast", "Lunch", "Dinner", "Snack", "Fasting")


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    birthdate = Column(DateTime, nullable=True)
    height = Column(Float, nullable=True)  # cm
    created_at = Column(DateTime, default=datetime.utcnow)

    glucose_logs = relationship(
        "GlucoseLog",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    weight_history = relationship(
        "WeightEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class GlucoseLog(Base):
    __tablename__ = "glucose_logs"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    timestamp = Column(DateTime, nullable=False)
    meal_type = Column(Text, nullable=False)  # one of MEAL_TYPES
    glycemia = Column(Float, nullable=False)  # g/L
    dosage = Column(Float, nullable=False)  # Novorapide units
    notes = Column(Text, nullable=True)

    user = relationship("User", back_populates="glucose_logs")

    __table_args__ = (
        Index("ix_glucose_logs_user_timestamp", "user_id", "timestamp"),
    )


class WeightEntry(Base):
    __tablename__ = "weight_history"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(DateTime, nullable=False)
    weight = Column(Float, nullable=False)  # kg

    user = relationship("User", back_populates="weight_history")

    __table_args__ = (
        Index("ix_weight_history_user_date", "user_id", "date"),
    )
