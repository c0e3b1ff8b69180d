from .db import db
from .user import User
from .session import Session
from .audit_log import AuditLog
from .category import Category
from .program import Program
from .schedule import ScheduleTemplate
from .slot import Slot
from .booking import Booking
