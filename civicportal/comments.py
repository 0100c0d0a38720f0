"""
Immutable comment trees.

A tree is a tuple of ``CommentNode``; every node holds its replies as a
tuple too. Updates copy only the nodes on the path from the root to the
changed node and share everything else with the input tree, so a caller
can compare subtrees by identity to tell what changed.

Lookups and updates use the backend's numeric comment ids.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple, Union

from civicportal.models import PostType, UserProfile


CommentId = int
CommentTree = Tuple["CommentNode", ...]


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


@dataclass(frozen=True)
class CommentNode:
    id: CommentId
    content: str = ""
    author: Optional[UserProfile] = None
    created_at: str = ""
    updated_at: str = ""
    post_id: Optional[int] = None
    post_type: Optional[str] = None
    parent_id: Optional[CommentId] = None
    upvotes: int = 0
    downvotes: int = 0
    has_voted: bool = False
    children: CommentTree = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CommentNode":
        """
        Build a node (and its replies) from a backend payload.

        Issue comments, response comments and topic replies name their
        fields differently; the variants are resolved here once.
        """
        author = _first(data, "author", "createdBy", "user")
        children = _first(data, "children", "childReplies", "replies", default=[])
        post_type = data.get("postType")
        return cls(
            id=int(data["id"]),
            content=str(_first(data, "content", "description", "text", "message", default="")),
            author=UserProfile.from_api(author) if isinstance(author, dict) else None,
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            post_id=_first(data, "postId", "topicId"),
            post_type=str(post_type) if post_type else None,
            parent_id=_first(data, "parentId", "parentReplyId"),
            upvotes=int(_first(data, "upvoteCount", "upvotes", "likes", default=0)),
            downvotes=int(_first(data, "downvoteCount", "downvotes", default=0)),
            has_voted=bool(_first(data, "hasvoted", "hasVoted", "hasUpvoted", default=False)),
            children=tuple(cls.from_api(c) for c in children if isinstance(c, dict)),
        )

    @property
    def author_name(self) -> str:
        return self.author.name if self.author and self.author.name else "Anonymous"

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


def tree_from_api(items: Sequence[Dict[str, Any]]) -> CommentTree:
    return tuple(CommentNode.from_api(item) for item in items if isinstance(item, dict))


def _update(tree: CommentTree, target_id: CommentId, change) -> CommentTree:
    """Apply change() to the first node with target_id, copying only its ancestors"""
    for index, node in enumerate(tree):
        if node.id == target_id:
            new_node = change(node)
        else:
            new_children = _update(node.children, target_id, change)
            if new_children is node.children:
                continue
            new_node = replace(node, children=new_children)
        return tree[:index] + (new_node,) + tree[index + 1:]
    return tree


def append_reply(tree: CommentTree, parent_id: CommentId, reply: CommentNode) -> CommentTree:
    """
    Return a tree with ``reply`` added as the last child of ``parent_id``.

    If no node has that id the input tree object itself is returned.
    """
    return _update(tree, parent_id,
                   lambda node: replace(node, children=node.children + (reply,)))


def replace_comment(tree: CommentTree, target_id: CommentId, updated: CommentNode) -> CommentTree:
    """
    Return a tree where ``target_id`` is swapped for ``updated``.

    The replacement keeps its own children; unknown ids return the input
    tree object unchanged.
    """
    return _update(tree, target_id, lambda node: updated)


def find_comment(tree: CommentTree, target_id: CommentId) -> Optional[CommentNode]:
    for node, _depth in iter_comments(tree):
        if node.id == target_id:
            return node
    return None


def iter_comments(tree: CommentTree, depth: int = 0) -> Iterator[Tuple[CommentNode, int]]:
    """Depth-first walk yielding (node, depth)"""
    for node in tree:
        yield node, depth
        yield from iter_comments(node.children, depth + 1)


def count_comments(tree: CommentTree) -> int:
    return sum(1 for _ in iter_comments(tree))


class CommentThread:
    """
    Comment tree of one post, kept in sync with the comments service.

    Each mutation sends one request and, on success, patches the local
    tree with the node the server returned. Replies are comments posted
    against the parent comment (post type COMMENT).
    """

    def __init__(self, service, post_id: int, post_type: PostType = PostType.ISSUE,
                 user_id: Optional[int] = None):
        self.service = service
        self.post_id = post_id
        self.post_type = post_type
        self.user_id = user_id
        self.tree: CommentTree = ()
        self.total_elements = 0

    async def load(self, page: int = 0, size: int = 20) -> Optional[CommentTree]:
        result = await self.service.list_for_post(self.post_id, self.post_type, page=page, size=size)
        if result is None:
            return None
        self.tree = tuple(result.content)
        self.total_elements = result.total_elements
        return self.tree

    async def add_comment(self, text: str) -> Optional[CommentNode]:
        node = await self.service.create(self.post_id, self.post_type, text, user_id=self.user_id)
        if node is None:
            return None
        # Listing is newest first
        self.tree = (node,) + self.tree
        self.total_elements += 1
        return node

    async def reply(self, parent_id: CommentId, text: str) -> Optional[CommentNode]:
        node = await self.service.create(parent_id, PostType.COMMENT, text, user_id=self.user_id)
        if node is None:
            return None
        self.tree = append_reply(self.tree, parent_id, node)
        return node

    async def vote(self, comment_id: CommentId, up: bool = True,
                   remove: bool = False) -> Optional[Union[CommentNode, bool]]:
        """
        Vote on a comment.

        None means the session ended. When the server sends the comment
        back it replaces the local node; an empty reply leaves the tree as
        it was and returns True.
        """
        if up:
            updated = await self.service.upvote(comment_id, remove=remove)
        else:
            updated = await self.service.downvote(comment_id, remove=remove)
        if updated is None:
            return None
        if not isinstance(updated, CommentNode):
            return True
        self.tree = replace_comment(self.tree, comment_id, updated)
        return updated
