"""
Responses service - official and follow-up responses to posts
"""

from typing import Any, Dict, Optional

from civicportal.endpoints import Responses
from civicportal.exceptions import ValidationError
from civicportal.models import ResponseRecord
from civicportal.services.base import BaseService


class ResponsesService(BaseService):

    async def create(self, request: Dict[str, Any]) -> Optional[ResponseRecord]:
        return await self._one("POST", Responses.ROOT, ResponseRecord.from_api,
                               "Failed to create response", json=request)

    async def get(self, response_id: int) -> Optional[ResponseRecord]:
        return await self._one("GET", Responses.by_id(response_id), ResponseRecord.from_api,
                               "Failed to fetch response")

    async def update(self, response_id: int, request: Dict[str, Any]) -> Optional[ResponseRecord]:
        return await self._one("PUT", Responses.by_id(response_id), ResponseRecord.from_api,
                               "Failed to update response", json=request)

    async def delete(self, response_id: int) -> Optional[bool]:
        return await self._action("DELETE", Responses.by_id(response_id), "Failed to delete response")

    async def rate(self, response_id: int, rating: int,
                   feedback_comment: Optional[str] = None) -> Optional[bool]:
        """Rate a response from 1 to 5 with optional feedback"""
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5", {"rating": rating})
        params: Dict[str, Any] = {"rating": rating}
        if feedback_comment and feedback_comment.strip():
            params["feedbackComment"] = feedback_comment.strip()
        return await self._action("POST", Responses.rate(response_id), "Failed to submit rating", params=params)
