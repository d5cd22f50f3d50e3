# utils/errors.py - Domain error taxonomy, each kind carrying its HTTP status
from fastapi import status


class TablePlannerError(Exception):
    """Base class for expected, caller-recoverable failures."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(TablePlannerError):
    status_code = status.HTTP_404_NOT_FOUND

    @classmethod
    def reservation(cls, reservation_id: int) -> "NotFound":
        return cls(f"Reservation with ID {reservation_id} not found.")

    @classmethod
    def confirmation_number(cls, code: str) -> "NotFound":
        return cls(f"Reservation with confirmation number {code} not found.")

    @classmethod
    def store(cls, store_id: int) -> "NotFound":
        return cls(f"Store not found with id: {store_id}")

    @classmethod
    def review(cls, review_id: int) -> "NotFound":
        return cls(f"Review with ID {review_id} not found.")

    @classmethod
    def username(cls, username: str) -> "NotFound":
        return cls(f"Username not found: {username}")


class InvalidStatus(TablePlannerError):
    status_code = status.HTTP_400_BAD_REQUEST

    @classmethod
    def of(cls, value) -> "InvalidStatus":
        value = getattr(value, "value", value)
        return cls(f"Invalid reservation status: {value}")


class InvalidTime(TablePlannerError):
    status_code = status.HTTP_400_BAD_REQUEST


class AccessDenied(TablePlannerError):
    status_code = status.HTTP_403_FORBIDDEN

    @classmethod
    def reservation(cls, username: str, reservation_id: int) -> "AccessDenied":
        return cls(f"User {username} is not authorized to access the reservation {reservation_id}")

    @classmethod
    def store(cls, username: str, store_name: str) -> "AccessDenied":
        return cls(f"User {username} is not authorized to access store {store_name}")

    @classmethod
    def review(cls, username: str, review_id: int) -> "AccessDenied":
        return cls(f"User '{username}' is not authorized to perform action on review with ID {review_id}.")


class AlreadyExists(TablePlannerError):
    status_code = status.HTTP_409_CONFLICT


class Conflict(TablePlannerError):
    status_code = status.HTTP_409_CONFLICT
