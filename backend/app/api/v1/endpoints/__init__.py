# API endpoints
from . import auth, schools, departments, staff, students, academic, fees, library, transportation, emergency, self_service, health

__all__ = ["auth", "schools", "departments", "staff", "students", "academic", "fees", "library", "transportation", "emergency", "self_service", "health"]
