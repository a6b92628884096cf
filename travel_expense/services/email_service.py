"""
Email Service
Sends emails for request submissions and review outcomes
"""

import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from datetime import datetime
from html import escape
from typing import List, Optional, Tuple

from travel_expense.config.settings import settings
from travel_expense.utils.helpers import format_datetime
from travel_expense.utils.logger import setup_logger

logger = setup_logger()

SIGNATURE_TEAM = "Travel & Expense Management Team"


class EmailService:
    """Email service for approval workflow notifications"""

    def __init__(self):
        """Initialize email service with SMTP configuration"""
        self.smtp_server = settings.SMTP_SERVER
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.timeout = settings.SMTP_TIMEOUT_SECONDS
        self.from_email = settings.FROM_EMAIL or self.smtp_username
        self.from_name = settings.FROM_NAME

        # Check if email is configured
        self.is_configured = bool(self.smtp_username and self.smtp_password)

        if not self.is_configured:
            logger.warning("Email service not configured. Set SMTP credentials in .env file.")

    def _send_email(self, to_email: str, subject: str, html_content: str, text_content: str = None) -> bool:
        """
        Send email via SMTP

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML email body
            text_content: Plain text fallback (optional)

        Returns:
            bool: True if the message was handed to the SMTP server
        """
        if not self.is_configured:
            logger.warning(f"Email not sent to {to_email} - SMTP not configured")
            return False

        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{self.from_name} <{self.from_email}>"
            msg['To'] = to_email

            if text_content:
                msg.attach(MIMEText(text_content, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            logger.info(f"Email sent to {to_email}: {subject}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {str(e)}")
            return False

    def send_email(self, to_email: str, subject: str, html_body: str, text_body: str = None) -> bool:
        """
        Send a message wrapped in the standard layout

        Args:
            to_email: Recipient email address
            subject: Email subject (also the heading)
            html_body: Inner HTML content
            text_body: Plain text content

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        html_content = self._render_layout(subject, html_body)
        text_content = self._render_plain_text(subject, text_body or "")
        return self._send_email(to_email, subject, html_content, text_content)

    def _render_layout(self, subject: str, body: str) -> str:
        return f"""
<div style="font-family: 'Segoe UI', Roboto, Arial, sans-serif; background: #f8fafc; padding: 32px; color: #222;">
    <div style="max-width: 600px; margin: 0 auto; background: #fff; border-radius: 12px; overflow: hidden;">
        <div style="background: linear-gradient(90deg, #6366f1 0%, #8b5cf6 100%); padding: 24px 32px;">
            <h1 style="color: #fff; font-size: 1.5rem; margin: 0;">Travel &amp; Expense Management</h1>
        </div>
        <div style="padding: 32px;">
            <h2 style="font-size: 1.2rem; color: #6366f1; margin-top: 0;">{escape(subject)}</h2>
            <div style="font-size: 1rem; margin: 24px 0; line-height: 1.7;">
                {body}
            </div>
            <div style="margin-top: 32px; font-size: 0.95rem; color: #555;">
                Regards,<br/>
                <strong>{SIGNATURE_TEAM}</strong><br/>
                <span style="color: #888; font-size: 0.9em;">This is an automated message. Please do not reply directly to this email.</span>
            </div>
        </div>
    </div>
</div>
"""

    def _render_plain_text(self, subject: str, body: str) -> str:
        return (
            f"{subject}\n\n{body}\n\nRegards,\n{SIGNATURE_TEAM}\n"
            "(This is an automated message. Please do not reply.)"
        )

    def _details_html(self, details: List[Tuple[str, str]]) -> str:
        items = "".join(
            f"<li><strong>{escape(label)}:</strong> {escape(str(value))}</li>" for label, value in details
        )
        return f"<ul style='margin:16px 0 24px 24px;'>{items}</ul>"

    def _details_text(self, details: List[Tuple[str, str]]) -> str:
        return "\n".join(f"- {label}: {value}" for label, value in details)

    def _now(self) -> str:
        return format_datetime(datetime.utcnow())

    def send_submission_confirmation(
        self,
        to_email: str,
        employee_name: str,
        request_data: dict
    ) -> bool:
        """
        Send confirmation email when a request is submitted

        Args:
            to_email: Submitter email
            employee_name: Submitter full name
            request_data: Dictionary with "label", "summary" and "details"
        """
        label = request_data["label"]
        subject = f"{label} Submitted"
        now = self._now()

        html_body = (
            f"<p>Dear <strong>{escape(employee_name)}</strong>,</p>"
            f"<p>Your {escape(label.lower())} {escape(request_data['summary'])} has been "
            f"<span style='color:#22c55e; font-weight:bold;'>successfully submitted</span> and is pending approval.</p>"
            f"{self._details_html(request_data['details'])}"
            f"<p>Submitted on: <strong>{now}</strong></p>"
            "<p>You will receive an update as soon as your manager or admin reviews it.</p>"
        )
        text_body = (
            f"Dear {employee_name},\n\n"
            f"Your {label.lower()} {request_data['summary']} has been successfully submitted and is pending approval.\n"
            f"{self._details_text(request_data['details'])}\n"
            f"Submitted on: {now}"
        )
        return self.send_email(to_email, subject, html_body, text_body)

    def send_manager_heads_up(
        self,
        to_email: str,
        manager_name: str,
        employee_name: str,
        request_data: dict
    ) -> bool:
        """
        Tell the assigned manager that a direct report submitted a request

        Args:
            to_email: Manager email
            manager_name: Manager full name
            employee_name: Submitter full name
            request_data: Dictionary with "label", "summary" and "details"
        """
        label = request_data["label"]
        subject = f"New {label} Submitted"

        html_body = (
            f"<p>Dear <strong>{escape(manager_name)}</strong>,</p>"
            f"<p>A new {escape(label.lower())} has been submitted by <strong>{escape(employee_name)}</strong> "
            f"{escape(request_data['summary'])}.</p>"
            f"{self._details_html(request_data['details'])}"
            "<p>Please review and take action in the system.</p>"
        )
        text_body = (
            f"Dear {manager_name},\n\n"
            f"A new {label.lower()} has been submitted by {employee_name} {request_data['summary']}.\n"
            f"{self._details_text(request_data['details'])}\n"
            "Please review and take action in the system."
        )
        return self.send_email(to_email, subject, html_body, text_body)

    def send_review_outcome(
        self,
        to_email: str,
        employee_name: str,
        request_data: dict,
        decision: str,
        reviewer_name: str,
        reviewer_role: str,
        comments: Optional[str] = None,
        reviewed_at: Optional[datetime] = None
    ) -> bool:
        """
        Send approval or rejection email to the submitter

        Args:
            to_email: Submitter email
            employee_name: Submitter full name
            request_data: Dictionary with "label", "summary" and "details"
            decision: "Approved" or "Rejected"
            reviewer_name: Reviewer full name
            reviewer_role: Reviewer role
            comments: Optional reviewer remarks
            reviewed_at: Review timestamp
        """
        label = request_data["label"]
        subject = f"Your {label} has been {decision}"
        color = "#22c55e" if decision == "Approved" else "#ef4444"
        reviewed_on = format_datetime(reviewed_at or datetime.utcnow())

        html_body = (
            f"<p>Dear <strong>{escape(employee_name)}</strong>,</p>"
            f"<p>Your {escape(label.lower())} {escape(request_data['summary'])} has been "
            f"<span style='color:{color}; font-weight:bold;'>{decision.lower()}</span> "
            f"by {escape(reviewer_name)} ({escape(reviewer_role)}).</p>"
        )
        if comments:
            html_body += f"<p><strong>Remarks:</strong> {escape(comments)}</p>"
        html_body += (
            f"<p>Reviewed on: <strong>{reviewed_on}</strong></p>"
            "<p>If you have any questions, please contact support.</p>"
        )

        text_body = (
            f"Dear {employee_name},\n\n"
            f"Your {label.lower()} {request_data['summary']} has been {decision.lower()} "
            f"by {reviewer_name} ({reviewer_role})."
        )
        if comments:
            text_body += f"\nRemarks: {comments}"
        text_body += f"\nReviewed on: {reviewed_on}"

        return self.send_email(to_email, subject, html_body, text_body)


# Create singleton instance
email_service = EmailService()
