"""
Card components.

Small reusable building blocks for dashboards and list pages.
"""

from .announcement import Announcement, AnnouncementList
from .stat import StatCard
from .student import StudentProgressCard
from .table import DataTable

__all__ = ["Announcement", "AnnouncementList", "StatCard", "StudentProgressCard", "DataTable"]
