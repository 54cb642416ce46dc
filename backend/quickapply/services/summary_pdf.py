import io
from datetime import datetime

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from ..models.job import Job
from .job_catalog import job_skills

BRAND_COLOR = HexColor("#0ea5a4")
TEXT_COLOR = HexColor("#111111")


def render_application_summary(
    *,
    job: Job,
    name: str,
    email: str,
    phone: str | None,
    message: str | None,
    applied_at: datetime,
) -> bytes:
    """One-page "Application Summary" PDF attached to the confirmation email."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    width, height = letter

    c.setFont("Helvetica-Bold", 18)
    c.setFillColor(BRAND_COLOR)
    c.drawCentredString(width / 2, height - 60, "Application Summary")

    c.setFillColor(TEXT_COLOR)
    c.setFont("Helvetica", 12)
    lines = [
        f"Job Title: {job.title}",
        f"Company: {job.company}",
        f"Location: {job.location or 'N/A'}",
    ]
    skills = job_skills(job)
    if skills:
        lines.append(f"Skills: {', '.join(skills)}")
    lines += [
        "",
        f"Applicant: {name}",
        f"Email: {email}",
        f"Phone: {phone or 'N/A'}",
        f"Applied: {applied_at.strftime('%Y-%m-%d %H:%M UTC')}",
        "",
        "Message:",
    ]
    lines += (message or "N/A").splitlines() or ["N/A"]

    y = height - 100
    for line in lines:
        if y < 60:
            c.showPage()
            c.setFont("Helvetica", 12)
            y = height - 50
        c.drawString(50, y, line[:100])
        y -= 16
    c.save()
    return buf.getvalue()
