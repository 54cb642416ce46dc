from .job import Job
from .quick_application import QuickApplication

__all__ = ["Job", "QuickApplication"]
