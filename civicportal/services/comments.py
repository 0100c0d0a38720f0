"""
Comments service - threaded comments on issues, responses and comments
"""

from typing import Any, Dict, Optional, Union

from civicportal.comments import CommentNode
from civicportal.endpoints import Comments, paginated_params, DEFAULT_PAGE_SIZE
from civicportal.models import Page, PostType
from civicportal.services.base import BaseService, enum_value


class CommentsService(BaseService):

    async def list_for_post(self, post_id: int, post_type: Union[PostType, str],
                            page: int = 0, size: int = DEFAULT_PAGE_SIZE,
                            sort_by: str = "createdAt", sort_dir: str = "desc") -> Optional[Page[CommentNode]]:
        params = paginated_params(page, size, sort_by, sort_dir,
                                  postId=post_id, postType=enum_value(post_type))
        return await self._page(Comments.ROOT, CommentNode.from_api, "Failed to fetch comments", params=params)

    async def create(self, post_id: int, post_type: Union[PostType, str], text: str,
                     user_id: Optional[int] = None, private: bool = False) -> Optional[CommentNode]:
        """Comment on a post; replying to a comment uses post type COMMENT"""
        request: Dict[str, Any] = {
            "text": text.strip(),
            "isPrivate": private,
            "postId": post_id,
            "postType": enum_value(post_type),
        }
        if user_id is not None:
            request["userId"] = int(user_id)
        return await self._one("POST", Comments.ROOT, CommentNode.from_api,
                               "Failed to post comment", json=request)

    async def upvote(self, comment_id: int, remove: bool = False) -> Optional[Union[CommentNode, bool]]:
        """Updated comment, or True when the server answered with no body"""
        method = "DELETE" if remove else "POST"
        return await self._one(method, Comments.upvote(comment_id), CommentNode.from_api,
                               "Failed to vote on comment", allow_empty=True)

    async def downvote(self, comment_id: int, remove: bool = False) -> Optional[Union[CommentNode, bool]]:
        method = "DELETE" if remove else "POST"
        return await self._one(method, Comments.downvote(comment_id), CommentNode.from_api,
                               "Failed to vote on comment", allow_empty=True)
