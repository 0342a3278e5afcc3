import os
import secrets

from school_directory.utils.datetime import minutes_from_now

OTP_LENGTH = 6
OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))


def generate_otp() -> str:
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


def otp_expiry():
    return minutes_from_now(OTP_EXPIRE_MINUTES)
