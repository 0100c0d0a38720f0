"""
Resource services for the civic backend.
"""

from civicportal.services.base import BaseService
from civicportal.services.issues import IssuesService
from civicportal.services.comments import CommentsService
from civicportal.services.topics import TopicsService
from civicportal.services.announcements import AnnouncementsService
from civicportal.services.responses import ResponsesService
from civicportal.services.departments import DepartmentsService
from civicportal.services.leaders import LeadersService
from civicportal.services.dashboard import DashboardService


class PortalServices:
    """All services bound to one authenticated client"""

    def __init__(self, client):
        self.client = client
        self.issues = IssuesService(client)
        self.comments = CommentsService(client)
        self.topics = TopicsService(client)
        self.announcements = AnnouncementsService(client)
        self.responses = ResponsesService(client)
        self.departments = DepartmentsService(client)
        self.leaders = LeadersService(client)
        self.dashboard = DashboardService(client)


__all__ = [
    "BaseService",
    "IssuesService",
    "CommentsService",
    "TopicsService",
    "AnnouncementsService",
    "ResponsesService",
    "DepartmentsService",
    "LeadersService",
    "DashboardService",
    "PortalServices",
]
