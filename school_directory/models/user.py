from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from school_directory.core.database import Base, BigIntId
from school_directory.utils.datetime import utcnow

class User(Base):
    __tablename__ = "app_users"

    id = Column(BigIntId, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    last_login = Column(DateTime)

    otps = relationship("OtpVerification", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
