from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from school_directory.core.database import Base, BigIntId
from school_directory.utils.datetime import utcnow

class OtpVerification(Base):
    """One row per issued code; the newest row for a user is the live one."""

    __tablename__ = "otp_verifications"

    id = Column(BigIntId, primary_key=True)
    user_id = Column(BigIntId, ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False, index=True)
    otp_hash = Column(String(255), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="otps")
