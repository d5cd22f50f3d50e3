# tables/users.py - Users and their roles
from sqlalchemy import Column, Integer, String, DateTime, Enum
from config import Base
import enum

class UserRole(enum.Enum):
    USER = "USER"
    PARTNER = "PARTNER"
    ADMIN = "ADMIN"

class Users(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    create_date = Column(DateTime, nullable=False)
    update_date = Column(DateTime, nullable=True)
