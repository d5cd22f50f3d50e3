# tables/stores.py - Stores owned by a partner, carrying the rating aggregate
from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Text, CheckConstraint
from config import Base

class Store(Base):
    __tablename__ = 'stores'

    id = Column(Integer, primary_key=True, index=True)
    partner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), unique=True, nullable=False)
    location = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    # Maintained incrementally by services.rating.RatingAggregator
    rating = Column(Float, nullable=False, default=0.0)
    reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("reviews >= 0", name="check_store_reviews_non_negative"),
    )
