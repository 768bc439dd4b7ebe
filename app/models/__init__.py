"""
Database Models
Import all models here for Alembic migrations
"""

from app.models.user import User
from app.models.profiles import Student, Coach, Institute, Club, CoachStudent, InstituteStudent, InstituteCoach
from app.models.club import ClubMember, ClubFacility
from app.models.event import Event, EventRegistration, EventAssignment, EventResultFile
from app.models.order import EventOrder, RegistrationOrder, RegistrationOrderItem
from app.models.payment import Payment
from app.models.notification import Notification
from app.models.certificate import Certificate
from app.models.activity_log import ActivityLog

__all__ = [
    "User",
    "Student",
    "Coach",
    "Institute",
    "Club",
    "CoachStudent",
    "InstituteStudent",
    "InstituteCoach",
    "ClubMember",
    "ClubFacility",
    "Event",
    "EventRegistration",
    "EventAssignment",
    "EventResultFile",
    "EventOrder",
    "RegistrationOrder",
    "RegistrationOrderItem",
    "Payment",
    "Notification",
    "Certificate",
    "ActivityLog",
]
