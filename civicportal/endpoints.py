"""
Backend URL catalogue.

Paths are relative to the configured base URL; ``AuthenticatedClient`` is
built with that base so services pass these paths straight through.
"""

from typing import Any, Dict


DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 20
DEFAULT_SORT_BY = "id"
DEFAULT_SORT_DIR = "desc"


def paginated_params(page: int = DEFAULT_PAGE, size: int = DEFAULT_PAGE_SIZE,
                     sort_by: str = DEFAULT_SORT_BY, sort_dir: str = DEFAULT_SORT_DIR,
                     **extra: Any) -> Dict[str, Any]:
    """Query parameters for a paged listing; None-valued extras are dropped"""
    params: Dict[str, Any] = {
        "page": page,
        "size": size,
        "sortBy": sort_by,
        "sortDir": sort_dir,
    }
    for key, value in extra.items():
        if value is not None and value != "":
            params[key] = value
    return params


def build_paginated_url(path: str, page: int = DEFAULT_PAGE, size: int = DEFAULT_PAGE_SIZE,
                        sort_by: str = DEFAULT_SORT_BY, sort_dir: str = DEFAULT_SORT_DIR) -> str:
    return f"{path}?page={page}&size={size}&sortBy={sort_by}&sortDir={sort_dir}"


class Auth:
    REGISTER = "/api/auth/register"
    LOGIN = "/api/auth/login"
    REFRESH = "/api/auth/refresh"


class Users:
    SEARCH_LEADERS = "/api/users/leaders"

    @staticmethod
    def complete_profile(user_id) -> str:
        return f"/api/users/{user_id}/complete-profile"


class Issues:
    ROOT = "/api/issues"
    SEARCH = "/api/issues/search"

    @staticmethod
    def by_id(issue_id) -> str:
        return f"/api/issues/{issue_id}"

    @staticmethod
    def like(issue_id) -> str:
        return f"/api/issues/{issue_id}/like"

    @staticmethod
    def follow(issue_id) -> str:
        return f"/api/issues/{issue_id}/follow"

    @staticmethod
    def status(issue_id) -> str:
        return f"/api/issues/{issue_id}/status"

    @staticmethod
    def urgency(issue_id) -> str:
        return f"/api/issues/{issue_id}/urgency"

    @staticmethod
    def escalate(issue_id) -> str:
        return f"/api/issues/{issue_id}/escalate"


class Comments:
    ROOT = "/api/comments"

    @staticmethod
    def upvote(comment_id) -> str:
        return f"/api/comments/{comment_id}/upvote"

    @staticmethod
    def downvote(comment_id) -> str:
        return f"/api/comments/{comment_id}/downvote"


class Responses:
    ROOT = "/api/responses"

    @staticmethod
    def by_id(response_id) -> str:
        return f"/api/responses/{response_id}"

    @staticmethod
    def rate(response_id) -> str:
        return f"/api/responses/{response_id}/rate"


class Topics:
    ROOT = "/api/topics"

    @staticmethod
    def by_id(topic_id) -> str:
        return f"/api/topics/{topic_id}"

    @staticmethod
    def upvote(topic_id) -> str:
        return f"/api/topics/{topic_id}/upvote"

    @staticmethod
    def downvote(topic_id) -> str:
        return f"/api/topics/{topic_id}/downvote"

    @staticmethod
    def follow(topic_id) -> str:
        return f"/api/topics/{topic_id}/follow"


class TopicReplies:
    ROOT = "/api/topic-replies"

    @staticmethod
    def by_topic(topic_id) -> str:
        return f"/api/topic-replies/topic/{topic_id}"

    @staticmethod
    def by_id(reply_id) -> str:
        return f"/api/topic-replies/{reply_id}"

    @staticmethod
    def upvote(reply_id) -> str:
        return f"/api/topic-replies/{reply_id}/upvote"

    @staticmethod
    def downvote(reply_id) -> str:
        return f"/api/topic-replies/{reply_id}/downvote"


class Announcements:
    ROOT = "/api/announcements"

    @staticmethod
    def by_id(announcement_id) -> str:
        return f"/api/announcements/{announcement_id}"

    @staticmethod
    def view(announcement_id) -> str:
        return f"/api/announcements/{announcement_id}/view"


class Dashboard:
    LEADER = "/api/dashboard/leader"


class Departments:
    ROOT = "/api/departments"

    @staticmethod
    def by_id(department_id) -> str:
        return f"/api/departments/{department_id}"

    @staticmethod
    def activate(department_id) -> str:
        return f"/api/departments/{department_id}/activate"

    @staticmethod
    def deactivate(department_id) -> str:
        return f"/api/departments/{department_id}/deactivate"


class Leaders:
    ROOT = "/api/leaders"
    SEARCH = "/api/leaders/search"

    @staticmethod
    def by_id(leader_id) -> str:
        return f"/api/leaders/{leader_id}"

    @staticmethod
    def generate_password(leader_id) -> str:
        return f"/api/leaders/{leader_id}/generate-password"


HEALTH = "/api/health"
