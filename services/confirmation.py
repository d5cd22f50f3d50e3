# services/confirmation.py - Confirmation numbers unique within a partner's reservations
import logging
import secrets
from typing import Callable
from sqlalchemy.orm import Session
from repository.reservations import ReservationRepo

logger = logging.getLogger(__name__)

SEGMENT_SPACE = 1_000_000

class ConfirmationCodeGenerator:
    """Draws 12-digit codes from a CSPRNG, re-drawing while the partner already uses one.

    The pre-check only narrows the race; the (partner_id, confirmation_number)
    unique constraint is what rejects a duplicate committed concurrently.
    """

    def __init__(self, randbelow: Callable[[int], int] = secrets.randbelow):
        self._randbelow = randbelow

    def candidate(self) -> str:
        first = self._randbelow(SEGMENT_SPACE)
        second = self._randbelow(SEGMENT_SPACE)
        return f"{first:06d}{second:06d}"

    def generate(self, db: Session, partner_id: int) -> str:
        code = self.candidate()
        while ReservationRepo.exists_by_partner_and_code(db, partner_id, code):
            logger.debug(f"Confirmation number collision for partner {partner_id}, drawing again")
            code = self.candidate()
        return code

code_generator = ConfirmationCodeGenerator()
