"""
Email Service
Account, event and order emails sent over SMTP
"""

import logging

import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from app.config import settings

logger = logging.getLogger(__name__)

_HTML_SHELL = """
<html>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #2c3e50;">{heading}</h2>
      {body}
      <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">
      <p>Best regards,<br><strong>{app_name} Team</strong></p>
    </div>
  </body>
</html>
"""


class EmailService:
    """Service for sending emails"""

    @staticmethod
    def _build_message(to_email: str, subject: str, text_body: str, html_body: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = settings.EMAIL_FROM
        message["To"] = to_email
        message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))
        return message

    @staticmethod
    def _wrap_html(heading: str, body: str) -> str:
        return _HTML_SHELL.format(heading=heading, body=body, app_name=settings.APP_NAME)

    @staticmethod
    async def send_email(to_email: str, subject: str, text_body: str, html_body: str) -> bool:
        """
        Send a text+html email

        Without SMTP credentials the message is logged instead of sent.

        Returns:
            True if the message was sent (or logged), False on SMTP failure
        """
        message = EmailService._build_message(to_email, subject, text_body, html_body)

        if not (settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD):
            logger.info("[EMAIL] (not sent, SMTP not configured) To: %s | Subject: %s\n%s",
                        to_email, subject, text_body)
            return True

        try:
            async with aiosmtplib.SMTP(hostname=settings.SMTP_HOST, port=settings.SMTP_PORT) as smtp:
                await smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                await smtp.sendmail(settings.EMAIL_FROM, to_email, message.as_string())
            logger.info("[EMAIL] Sent '%s' to %s", subject, to_email)
            return True
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning("[EMAIL] Send to %s failed: %s", to_email, e)
            return False

    @staticmethod
    async def send_otp_email(to_email: str, name: str, otp: str) -> bool:
        """Welcome + email verification code"""
        minutes = settings.OTP_EXPIRY_MINUTES
        text_body = f"""
Hi {name},

Welcome to {settings.APP_NAME}!

Your verification code is: {otp}

The code expires in {minutes} minutes.
        """
        html_body = EmailService._wrap_html(
            f"Welcome to {settings.APP_NAME}!",
            f"""
      <p>Hi {name},</p>
      <p>Use this code to verify your email address:</p>
      <div style="background-color: #f8f9fa; padding: 15px; border-left: 4px solid #007bff; margin: 20px 0;">
        <p style="font-size: 24px; letter-spacing: 4px;"><strong>{otp}</strong></p>
      </div>
      <p>The code expires in {minutes} minutes.</p>
            """
        )
        return await EmailService.send_email(
            to_email, f"Verify your email - {settings.APP_NAME}", text_body, html_body
        )

    @staticmethod
    async def send_password_reset_email(to_email: str, name: str, reset_token: str) -> bool:
        reset_link = f"{settings.FRONTEND_URL}/reset-password?token={reset_token}"
        minutes = settings.RESET_TOKEN_EXPIRY_MINUTES
        text_body = f"""
Hi {name},

We received a request to reset your password.

Reset it here: {reset_link}

This link expires in {minutes} minutes. If you did not ask for a reset, ignore this email.
        """
        html_body = EmailService._wrap_html(
            "Password Reset",
            f"""
      <p>Hi {name},</p>
      <p>We received a request to reset your password.</p>
      <p>
        <a href="{reset_link}" style="background-color: #007bff; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px; display: inline-block;">
          Reset Password
        </a>
      </p>
      <p>This link expires in {minutes} minutes. If you did not ask for a reset, ignore this email.</p>
            """
        )
        return await EmailService.send_email(
            to_email, f"Reset your password - {settings.APP_NAME}", text_body, html_body
        )

    @staticmethod
    async def send_account_created_email(to_email: str, name: str, role_label: str, temp_password: str) -> bool:
        """Credentials for accounts created by an admin or a roster import"""
        login_url = f"{settings.FRONTEND_URL}/login"
        text_body = f"""
Hi {name},

A {role_label} account has been created for you on {settings.APP_NAME}.

Email: {to_email}
Password: {temp_password}

IMPORTANT: Change this password after your first login.

Login here: {login_url}
        """
        html_body = EmailService._wrap_html(
            f"Your {settings.APP_NAME} account",
            f"""
      <p>Hi {name},</p>
      <p>A <strong>{role_label}</strong> account has been created for you.</p>
      <div style="background-color: #f8f9fa; padding: 15px; border-left: 4px solid #007bff; margin: 20px 0;">
        <p>Email: <code>{to_email}</code></p>
        <p>Password: <code>{temp_password}</code></p>
      </div>
      <p style="color: #e74c3c;"><strong>IMPORTANT:</strong> Change this password after your first login.</p>
      <p><a href="{login_url}">Login to {settings.APP_NAME}</a></p>
            """
        )
        return await EmailService.send_email(
            to_email, f"Your {role_label} account - {settings.APP_NAME}", text_body, html_body
        )

    @staticmethod
    async def send_event_moderation_email(
        to_email: str, name: str, event_name: str, new_status: str, remarks: str = None
    ) -> bool:
        remarks_text = f"\nAdmin notes: {remarks}\n" if remarks else ""
        text_body = f"""
Hi {name},

Your event "{event_name}" is now {new_status}.
{remarks_text}
        """
        html_body = EmailService._wrap_html(
            f"Event {new_status.title()}",
            f"""
      <p>Hi {name},</p>
      <p>Your event <strong>{event_name}</strong> is now <strong>{new_status}</strong>.</p>
      {f'<p>Admin notes: {remarks}</p>' if remarks else ''}
            """
        )
        return await EmailService.send_email(
            to_email, f"Event {new_status.title()}: {event_name}", text_body, html_body
        )

    @staticmethod
    async def send_order_status_email(
        to_email: str, name: str, order_number: str, event_name: str, new_status: str,
        total_amount: float = None, remarks: str = None
    ) -> bool:
        label = new_status.replace("_", " ").title()
        amount_text = f"Amount: INR {total_amount:.2f}\n" if total_amount else ""
        text_body = f"""
Hi {name},

Your order {order_number} for "{event_name}" is now {label}.
{amount_text}{f'Remarks: {remarks}' if remarks else ''}
        """
        html_body = EmailService._wrap_html(
            f"Order {label}",
            f"""
      <p>Hi {name},</p>
      <p>Your order <strong>{order_number}</strong> for <strong>{event_name}</strong> is now <strong>{label}</strong>.</p>
      {f'<p>Amount: INR {total_amount:.2f}</p>' if total_amount else ''}
      {f'<p>Remarks: {remarks}</p>' if remarks else ''}
            """
        )
        return await EmailService.send_email(
            to_email, f"Order {order_number} {label}", text_body, html_body
        )

    @staticmethod
    async def send_event_completion_email(to_email: str, name: str, event_name: str, message: str = None) -> bool:
        body_text = message or f'Registrations and results for "{event_name}" have been completed.'
        text_body = f"""
Hi {name},

{body_text}
        """
        html_body = EmailService._wrap_html(
            "Event Completed",
            f"""
      <p>Hi {name},</p>
      <p>{body_text}</p>
            """
        )
        return await EmailService.send_email(
            to_email, f"Event completed: {event_name}", text_body, html_body
        )


# Create singleton instance
email_service = EmailService()
