"""Registration, OTP verification and login.

A user moves from pending verification to verified exactly once, by
presenting the code from the newest OTP row issued for them. Older rows stay
in the table but are never consulted again.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_directory.core.errors import (
    AlreadyVerified,
    BadCredentials,
    DeliveryFailed,
    DuplicateEmail,
    NotFound,
    NotVerified,
    OtpExpired,
    OtpMismatch,
)
from school_directory.core.logger import get_logger
from school_directory.core.mail import send_otp_email
from school_directory.core.security import create_access_token, hash_password, verify_password
from school_directory.models.otp import OtpVerification
from school_directory.models.user import User
from school_directory.utils.datetime import utcnow
from school_directory.utils.otp import OTP_EXPIRE_MINUTES, generate_otp, otp_expiry

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(
        select(User).where(User.email == normalize_email(email))
    ).scalar_one_or_none()


def _require_user(db: Session, email: str) -> User:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    return user


def _issue_otp(db: Session, user: User) -> str:
    otp = generate_otp()
    db.add(OtpVerification(
        user_id=user.id,
        otp_hash=hash_password(otp),
        expires_at=otp_expiry()
    ))
    return otp


async def _deliver_otp(user: User, otp: str) -> None:
    try:
        await send_otp_email(user.email, otp, OTP_EXPIRE_MINUTES)
    except Exception as exc:
        logger.exception("otp_delivery_failed", user_id=user.id)
        raise DeliveryFailed(data=user) from exc
    logger.info("otp_sent", user_id=user.id)


async def register(db: Session, email: str, password: str) -> User:
    """Create an unverified user and mail them a fresh OTP.

    Raises DuplicateEmail if the address is taken. If the mail transport
    fails, DeliveryFailed is raised but the committed user row is kept so the
    caller can ask for a resend.
    """
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise DuplicateEmail()

    user = User(email=email, password_hash=hash_password(password), is_verified=False)
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmail() from exc

    otp = _issue_otp(db, user)
    db.commit()
    db.refresh(user)
    logger.info("user_registered", user_id=user.id)

    await _deliver_otp(user, otp)
    return user


def latest_otp(db: Session, user_id: int) -> OtpVerification | None:
    return db.execute(
        select(OtpVerification)
        .where(OtpVerification.user_id == user_id)
        .order_by(OtpVerification.created_at.desc(), OtpVerification.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def verify_otp(db: Session, email: str, code: str) -> User:
    user = _require_user(db, email)
    if user.is_verified:
        raise AlreadyVerified()

    record = latest_otp(db, user.id)
    if not record or record.is_used:
        raise OtpMismatch()

    if record.expires_at < utcnow():
        logger.info("otp_expired", user_id=user.id)
        raise OtpExpired()

    if not verify_password(code.strip(), record.otp_hash):
        logger.info("otp_mismatch", user_id=user.id)
        raise OtpMismatch()

    record.is_used = True
    user.is_verified = True
    db.commit()
    db.refresh(user)
    logger.info("user_verified", user_id=user.id)
    return user


async def resend_otp(db: Session, email: str) -> User:
    user = _require_user(db, email)
    if user.is_verified:
        raise AlreadyVerified()

    otp = _issue_otp(db, user)
    db.commit()
    db.refresh(user)

    await _deliver_otp(user, otp)
    return user


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    """Return the user and a freshly signed session token."""
    user = _require_user(db, email)

    # Unverified accounts are refused before the password is looked at.
    if not user.is_verified:
        raise NotVerified()

    if not verify_password(password, user.password_hash):
        logger.info("login_failed", user_id=user.id)
        raise BadCredentials()

    user.last_login = utcnow()
    db.commit()
    db.refresh(user)

    token = create_access_token(user.id)
    logger.info("user_logged_in", user_id=user.id)
    return user, token


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user
