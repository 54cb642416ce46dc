import logging
import smtplib
from email.message import EmailMessage

from .. import config

logger = logging.getLogger(__name__)


def smtp_configured() -> bool:
    return bool(config.SMTP_HOST and config.SMTP_USER and config.SMTP_PASS and config.SMTP_FROM)


def send_application_received_email(
    *,
    to_email: str,
    applicant_name: str | None,
    job_title: str | None,
    company: str | None,
    status: str,
    track_url: str,
    summary_pdf: bytes | None = None,
) -> None:
    """
    Sends the quick-apply confirmation email over SMTP.

    Env vars:
      SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM, SMTP_TLS, RECRUITER_EMAIL
    """
    if not smtp_configured():
        raise RuntimeError("SMTP is not configured (missing SMTP_HOST/SMTP_USER/SMTP_PASS/SMTP_FROM).")

    name = (applicant_name or "there").strip()
    jt = (job_title or "the role").strip()
    co = (company or "the company").strip()

    lines: list[str] = []
    lines.append(f"Hi {name},")
    lines.append("")
    lines.append(f"Your application for {jt} at {co} has been received.")
    lines.append(f"Status: {status}")
    lines.append("")
    lines.append(f"Track your application: {track_url}")
    lines.append("")
    if config.RECRUITER_EMAIL:
        lines.append(f"Need help? Reply to this email or contact {config.RECRUITER_EMAIL}.")
    else:
        lines.append("Need help? Reply to this email.")

    msg = EmailMessage()
    msg["Subject"] = f"Application received: {jt} at {co}"
    msg["From"] = config.SMTP_FROM
    msg["To"] = to_email
    if config.RECRUITER_EMAIL:
        msg["Cc"] = config.RECRUITER_EMAIL
    msg.set_content("\n".join(lines))
    if summary_pdf:
        msg.add_attachment(
            summary_pdf,
            maintype="application",
            subtype="pdf",
            filename="Application-Summary.pdf",
        )

    logger.info(f"Connecting to {config.SMTP_HOST}:{config.SMTP_PORT} (TLS={config.SMTP_TLS})")
    with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=15) as smtp:
        smtp.ehlo()
        if config.SMTP_TLS:
            smtp.starttls()
            smtp.ehlo()
        smtp.login(config.SMTP_USER, config.SMTP_PASS)
        smtp.send_message(msg)
    logger.info(f"Confirmation email sent to {to_email}")
