"""
Unit tests for the registration, OTP verification and login flow.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

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
from school_directory.core.security import verify_password, verify_token
from school_directory.models.otp import OtpVerification
from school_directory.models.user import User
from school_directory.services import auth as auth_service
from school_directory.utils.datetime import utcnow


def _otp_count(db_session, user_id):
    return db_session.execute(
        select(func.count()).select_from(OtpVerification).where(OtpVerification.user_id == user_id)
    ).scalar_one()


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_creates_pending_user_and_mails_code(self, db_session, mock_mail, sent_otp):
        user = await auth_service.register(db_session, "A@X.com", "pw123456")

        assert user.email == "a@x.com"
        assert user.is_verified is False
        assert verify_password("pw123456", user.password_hash)

        mock_mail.assert_awaited_once()
        code = sent_otp()
        assert len(code) == 6 and code.isdigit()

        record = auth_service.latest_otp(db_session, user.id)
        assert record.otp_hash != code
        assert verify_password(code, record.otp_hash)
        assert record.expires_at > utcnow()

    @pytest.mark.asyncio
    async def test_register_same_email_twice_conflicts(self, db_session, mock_mail):
        await auth_service.register(db_session, "a@x.com", "pw123456")

        with pytest.raises(DuplicateEmail) as exc_info:
            await auth_service.register(db_session, "a@x.com", "another-password")

        assert exc_info.value.status_code == 409
        assert mock_mail.await_count == 1

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_the_user(self, db_session, mock_mail):
        mock_mail.side_effect = ConnectionError("smtp down")

        with pytest.raises(DeliveryFailed) as exc_info:
            await auth_service.register(db_session, "a@x.com", "pw123456")

        user = auth_service.get_user_by_email(db_session, "a@x.com")
        assert user is not None
        assert user.is_verified is False
        assert exc_info.value.data is user
        assert _otp_count(db_session, user.id) == 1


class TestVerifyOtp:
    @pytest.mark.asyncio
    async def test_correct_code_verifies_user(self, db_session, mock_mail, sent_otp):
        await auth_service.register(db_session, "a@x.com", "pw123456")

        user = auth_service.verify_otp(db_session, "a@x.com", sent_otp())

        assert user.is_verified is True
        assert auth_service.latest_otp(db_session, user.id).is_used is True

    @pytest.mark.asyncio
    async def test_expired_code_leaves_user_pending(self, db_session, mock_mail, sent_otp):
        await auth_service.register(db_session, "a@x.com", "pw123456")
        code = sent_otp()

        later = utcnow() + timedelta(minutes=11)
        with patch("school_directory.services.auth.utcnow", return_value=later):
            with pytest.raises(OtpExpired):
                auth_service.verify_otp(db_session, "a@x.com", code)

        assert auth_service.get_user_by_email(db_session, "a@x.com").is_verified is False

    @pytest.mark.asyncio
    async def test_wrong_code_is_a_mismatch(self, db_session, mock_mail, sent_otp):
        await auth_service.register(db_session, "a@x.com", "pw123456")
        wrong = "000000" if sent_otp() != "000000" else "111111"

        with pytest.raises(OtpMismatch):
            auth_service.verify_otp(db_session, "a@x.com", wrong)

        assert auth_service.get_user_by_email(db_session, "a@x.com").is_verified is False

    @pytest.mark.asyncio
    async def test_already_verified(self, db_session, mock_mail, sent_otp):
        await auth_service.register(db_session, "a@x.com", "pw123456")
        code = sent_otp()
        auth_service.verify_otp(db_session, "a@x.com", code)

        with pytest.raises(AlreadyVerified):
            auth_service.verify_otp(db_session, "a@x.com", code)

    def test_unknown_email(self, db_session):
        with pytest.raises(NotFound):
            auth_service.verify_otp(db_session, "nobody@x.com", "123456")

    @pytest.mark.asyncio
    async def test_newest_code_wins_after_resend(self, db_session, mock_mail, sent_otp):
        with patch("school_directory.services.auth.generate_otp", side_effect=["111111", "222222"]):
            user = await auth_service.register(db_session, "a@x.com", "pw123456")
            await auth_service.resend_otp(db_session, "a@x.com")

        assert _otp_count(db_session, user.id) == 2
        assert sent_otp() == "222222"

        with pytest.raises(OtpMismatch):
            auth_service.verify_otp(db_session, "a@x.com", "111111")

        assert auth_service.verify_otp(db_session, "a@x.com", "222222").is_verified is True


class TestResendOtp:
    @pytest.mark.asyncio
    async def test_resend_refused_once_verified(self, db_session, mock_mail, sent_otp):
        await auth_service.register(db_session, "a@x.com", "pw123456")
        auth_service.verify_otp(db_session, "a@x.com", sent_otp())

        with pytest.raises(AlreadyVerified):
            await auth_service.resend_otp(db_session, "a@x.com")

    @pytest.mark.asyncio
    async def test_resend_unknown_email(self, db_session, mock_mail):
        with pytest.raises(NotFound):
            await auth_service.resend_otp(db_session, "nobody@x.com")

        mock_mail.assert_not_awaited()


class TestLogin:
    def test_login_issues_token_and_records_last_login(self, db_session, make_user):
        owner = make_user("a@x.com", "pw123456")
        assert owner.last_login is None

        user, token = auth_service.login(db_session, "a@x.com", "pw123456")

        assert verify_token(token) == owner.id
        assert user.last_login is not None

    @pytest.mark.parametrize("password", ["pw123456", "wrong-password"])
    def test_unverified_user_cannot_log_in(self, db_session, make_user, password):
        make_user("a@x.com", "pw123456", verified=False)

        with pytest.raises(NotVerified):
            auth_service.login(db_session, "a@x.com", password)

    def test_wrong_password(self, db_session, make_user):
        make_user("a@x.com", "pw123456")

        with pytest.raises(BadCredentials):
            auth_service.login(db_session, "a@x.com", "wrong-password")

        assert db_session.execute(select(User.last_login)).scalar_one() is None

    def test_unknown_user(self, db_session):
        with pytest.raises(NotFound):
            auth_service.login(db_session, "nobody@x.com", "pw123456")
