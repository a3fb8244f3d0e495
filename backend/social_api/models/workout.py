# social_api/models/workout.py
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base

class Workout(Base):
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    reps = Column(Integer, nullable=False)
    load = Column(Float, nullable=False)  # кг
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    owner = relationship("User", back_populates="workouts")

    def __str__(self):
        return f"{self.title} ({self.reps} x {self.load})"
