"""
Topics service - discussion topics and their threaded replies
"""

from typing import Any, Dict, List, Optional, Union

from civicportal.comments import CommentNode
from civicportal.endpoints import Topics, TopicReplies, paginated_params, DEFAULT_PAGE_SIZE
from civicportal.models import Language, Page, Topic
from civicportal.services.base import BaseService, enum_value


class TopicsService(BaseService):
    """Calls for /api/topics and /api/topic-replies"""

    async def list(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE,
                   sort_by: str = "createdAt", sort_dir: str = "desc") -> Optional[Page[Topic]]:
        return await self._page(Topics.ROOT, Topic.from_api, "Failed to fetch topics",
                                params=paginated_params(page, size, sort_by, sort_dir))

    async def get(self, topic_id: int) -> Optional[Topic]:
        return await self._one("GET", Topics.by_id(topic_id), Topic.from_api, "Failed to fetch topic")

    async def create(self, request: Dict[str, Any]) -> Optional[Topic]:
        return await self._one("POST", Topics.ROOT, Topic.from_api, "Failed to create topic", json=request)

    async def update(self, topic_id: int, request: Dict[str, Any]) -> Optional[Topic]:
        return await self._one("PUT", Topics.by_id(topic_id), Topic.from_api,
                               "Failed to update topic", json=request)

    async def delete(self, topic_id: int) -> Optional[bool]:
        return await self._action("DELETE", Topics.by_id(topic_id), "Failed to delete topic")

    async def upvote(self, topic_id: int) -> Optional[bool]:
        return await self._action("POST", Topics.upvote(topic_id), "Failed to upvote topic")

    async def downvote(self, topic_id: int) -> Optional[bool]:
        return await self._action("POST", Topics.downvote(topic_id), "Failed to downvote topic")

    async def follow(self, topic_id: int) -> Optional[bool]:
        return await self._action("POST", Topics.follow(topic_id), "Failed to follow topic")

    # ==================== Replies ====================

    async def list_replies(self, topic_id: int, page: int = 0,
                           size: int = DEFAULT_PAGE_SIZE) -> Optional[Page[CommentNode]]:
        """Replies oldest first, nested replies inline"""
        return await self._page(TopicReplies.by_topic(topic_id), CommentNode.from_api,
                                "Failed to fetch replies",
                                params=paginated_params(page, size, "createdAt", "asc"))

    async def create_reply(self, topic_id: int, description: str,
                           language: Union[Language, str] = Language.ENGLISH,
                           parent_reply_id: Optional[int] = None,
                           tags: Optional[List[str]] = None) -> Optional[CommentNode]:
        request: Dict[str, Any] = {
            "description": description.strip(),
            "language": enum_value(language),
            "topicId": topic_id,
            "tags": tags or [],
        }
        if parent_reply_id is not None:
            request["parentReplyId"] = parent_reply_id
        return await self._one("POST", TopicReplies.ROOT, CommentNode.from_api,
                               "Failed to post reply", json=request)

    async def upvote_reply(self, reply_id: int) -> Optional[bool]:
        return await self._action("POST", TopicReplies.upvote(reply_id), "Failed to upvote reply")

    async def downvote_reply(self, reply_id: int) -> Optional[bool]:
        return await self._action("POST", TopicReplies.downvote(reply_id), "Failed to downvote reply")
