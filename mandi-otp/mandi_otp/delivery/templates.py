"""
OTP Message Templates
=====================
Message bodies per purpose.
"""

from datetime import datetime, timezone

from ..otp.models import Purpose

BRAND = "Aloo Mandi"


def _minutes(expires_in: int) -> int:
    return max(1, expires_in // 60)


def _purpose_text(purpose: Purpose) -> str:
    return "login" if purpose == Purpose.LOGIN else "registration"


def sms_body(code: str, purpose: Purpose, expires_in: int) -> str:
    return (
        f"{BRAND}: Your OTP for {_purpose_text(purpose)} is {code}. "
        f"Valid for {_minutes(expires_in)} minutes. "
        "Do not share this code with anyone."
    )


def email_subject(purpose: Purpose) -> str:
    title = "Login" if purpose == Purpose.LOGIN else "Account Verification"
    return f"{BRAND} - {title} OTP"


def email_text(code: str, purpose: Purpose, expires_in: int) -> str:
    """Plain text version for clients that don't render HTML."""
    what = "login" if purpose == Purpose.LOGIN else "account verification"
    year = datetime.now(timezone.utc).year
    return (
        f"{BRAND} - OTP Verification\n\n"
        f"Your One-Time Password (OTP) for {what} is:\n\n"
        f"{code}\n\n"
        f"This OTP expires in {_minutes(expires_in)} minutes.\n"
        "Never share this OTP with anyone.\n\n"
        "If you didn't request this OTP, please ignore this email.\n\n"
        f"(c) {year} {BRAND}"
    )


def email_html(code: str, purpose: Purpose, expires_in: int) -> str:
    title = "Login" if purpose == Purpose.LOGIN else "Account Verification"
    return f"""
    <html>
    <body style="font-family:sans-serif;color:#333;background:#f4f7f6">
      <h2 style="color:#2E7D32">{BRAND}</h2>
      <h3>{title} OTP</h3>
      <p>Please use the following One-Time Password to complete your
         {_purpose_text(purpose)}:</p>
      <p style="font-size:32px;font-weight:bold;letter-spacing:8px;
                font-family:'Courier New',monospace;color:#2E7D32">{code}</p>
      <p style="color:#E65100">This OTP expires in {_minutes(expires_in)} minutes.
         Never share this OTP with anyone.</p>
      <p style="font-size:0.9em;color:#888">
        If you didn't request this OTP, please ignore this email.
      </p>
    </body>
    </html>
    """
