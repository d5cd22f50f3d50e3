# tables/reservations.py - Reservation lifecycle records
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Enum, UniqueConstraint
from config import Base
import enum

class ReservationStatus(enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"

class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    # Copied from the store so code uniqueness can be enforced per partner
    partner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reservation_time = Column(DateTime, nullable=False, index=True)
    status = Column(Enum(ReservationStatus), nullable=False, default=ReservationStatus.PENDING, index=True)
    confirmation_number = Column(String(12), nullable=True)
    reviewed = Column(Boolean, nullable=False, default=False)
    version = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("partner_id", "confirmation_number", name="uq_reservation_partner_confirmation"),
    )
    __mapper_args__ = {"version_id_col": version}
