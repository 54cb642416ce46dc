import json
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.job import Job
from ..utils.error_handlers import NotFoundError, PersistenceError, get_error_message

logger = logging.getLogger(__name__)

MIN_SEEDED_JOBS = 10

# (title, company, location, salary_range, job_type, experience_level, skills, description)
SAMPLE_JOBS = [
    ("Frontend Developer", "Awesome Co", "Remote", "8-15 LPA", "Full-time", "Junior",
     ["React", "TypeScript", "CSS", "HTML5"],
     "Build modern, responsive UI with React and TypeScript."),
    ("Backend Engineer", "Tech Corp", "Bengaluru", "10-20 LPA", "Full-time", "Mid",
     ["Python", "FastAPI", "PostgreSQL", "REST API"],
     "Design and develop scalable APIs backed by relational databases."),
    ("Full Stack Developer", "NextGen Systems", "Hyderabad", "12-22 LPA", "Hybrid", "Mid",
     ["React", "Python", "PostgreSQL", "AWS"],
     "Build end-to-end features across frontend and backend in an agile team."),
    ("DevOps Engineer", "Cloudify", "Pune", "14-24 LPA", "Full-time", "Senior",
     ["Docker", "Kubernetes", "AWS", "Jenkins"],
     "Automate deployment pipelines and manage cloud infrastructure."),
    ("Data Engineer", "DataWorks", "Bengaluru", "12-20 LPA", "Full-time", "Mid",
     ["Python", "Airflow", "SQL", "Spark"],
     "Build ETL pipelines and ensure data quality across large datasets."),
    ("Machine Learning Engineer", "AI Labs", "Remote", "15-28 LPA", "Remote", "Senior",
     ["Python", "PyTorch", "TensorFlow", "ML Ops"],
     "Train and deploy ML models in production."),
    ("QA Automation Engineer", "QualityPlus", "Noida", "8-14 LPA", "Full-time", "Mid",
     ["Selenium", "Cypress", "API Testing", "pytest"],
     "Develop and maintain automated test suites."),
    ("UI/UX Designer", "DesignHub", "Remote", "9-16 LPA", "Contract", "Mid",
     ["Figma", "Prototyping", "User Research"],
     "Design user-friendly interfaces and create prototypes."),
    ("Site Reliability Engineer", "Uptime Inc.", "Bengaluru", "16-26 LPA", "Full-time", "Senior",
     ["Linux", "Observability", "GCP", "Prometheus"],
     "Ensure system reliability and performance; respond to incidents."),
    ("Product Manager", "RoadmapHQ", "Gurugram", "18-30 LPA", "Hybrid", "Senior",
     ["Product Strategy", "Analytics", "Communication", "Agile"],
     "Lead product strategy and roadmap with engineering and design."),
    ("Security Engineer", "SecureNet", "Chennai", "16-28 LPA", "Full-time", "Senior",
     ["OWASP", "Threat Modeling", "Penetration Testing"],
     "Protect applications from security threats and run security audits."),
    ("Software Engineer - Python", "PythonTech", "Mumbai", "10-18 LPA", "Full-time", "Mid",
     ["Python", "Django", "PostgreSQL", "Celery"],
     "Develop backend services using Python for millions of users."),
]


def get_job(db: Session, job_id) -> Job:
    """Read-only job lookup; unknown or malformed ids are `NotFoundError`."""
    try:
        job_id = int(job_id)
    except (TypeError, ValueError):
        raise NotFoundError(get_error_message("job_not_found"))

    try:
        job = db.query(Job).filter(Job.id == job_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching job {job_id}: {e}")
        raise PersistenceError() from e

    if not job:
        raise NotFoundError(get_error_message("job_not_found"), details={"job_id": job_id})
    return job


def job_skills(job: Job) -> list[str]:
    try:
        skills = json.loads(job.skills_required or "[]")
    except (TypeError, ValueError):
        return []
    return [str(s) for s in skills] if isinstance(skills, list) else []


def seed_jobs(db: Session) -> int:
    """Insert sample jobs when the catalog holds fewer than MIN_SEEDED_JOBS. Returns rows added."""
    count = db.query(Job).count()
    if count >= MIN_SEEDED_JOBS:
        logger.info(f"Jobs table has {count} jobs (minimum {MIN_SEEDED_JOBS}), skipping seed")
        return 0

    for title, company, location, salary_range, job_type, level, skills, description in SAMPLE_JOBS:
        db.add(
            Job(
                title=title,
                company=company,
                location=location,
                salary_range=salary_range,
                job_type=job_type,
                experience_level=level,
                skills_required=json.dumps(skills),
                description=description,
            )
        )
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info(f"Seeded {len(SAMPLE_JOBS)} jobs")
    return len(SAMPLE_JOBS)
