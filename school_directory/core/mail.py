import os

from dotenv import load_dotenv
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


conf = ConnectionConfig(
    MAIL_USERNAME=os.getenv("MAIL_USERNAME", ""),
    MAIL_PASSWORD=os.getenv("MAIL_PASSWORD", ""),
    MAIL_FROM=os.getenv("MAIL_FROM", "noreply@school-directory.dev"),
    MAIL_FROM_NAME=os.getenv("MAIL_FROM_NAME", "School Directory"),
    MAIL_PORT=int(os.getenv("MAIL_PORT", "587")),
    MAIL_SERVER=os.getenv("MAIL_SERVER", "localhost"),
    MAIL_STARTTLS=_flag("MAIL_STARTTLS", "true"),
    MAIL_SSL_TLS=_flag("MAIL_SSL_TLS", "false"),
    USE_CREDENTIALS=_flag("MAIL_USE_CREDENTIALS", "true"),
    VALIDATE_CERTS=_flag("MAIL_VALIDATE_CERTS", "true"),
    SUPPRESS_SEND=1 if _flag("MAIL_SUPPRESS_SEND", "false") else 0,
)

fm = FastMail(conf)


async def send_otp_email(email: str, otp: str, expires_minutes: int) -> None:
    message = MessageSchema(
        subject="Your verification code",
        recipients=[email],
        body=f"Your OTP is {otp}. It expires in {expires_minutes} minutes.",
        subtype="plain"
    )

    await fm.send_message(message)
