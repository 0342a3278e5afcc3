from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey
from school_directory.core.database import Base, BigIntId
from school_directory.utils.datetime import utcnow

class School(Base):
    __tablename__ = "schools"

    id = Column(BigIntId, primary_key=True)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    contact = Column(BigInteger, nullable=False)
    image = Column(Text)
    email_id = Column(String(255), nullable=False)
    created_by = Column(BigIntId, ForeignKey("app_users.id", ondelete="SET NULL"), index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
