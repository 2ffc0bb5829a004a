"""
API data models. Single import surface for DB entities.

DB entities (api.models.models):
- StudyPlan, Certificate
"""

from api.models.models import StudyPlan, Certificate

__all__ = [
    "StudyPlan",
    "Certificate",
]
