from __future__ import annotations

from courier.application.dto.requests import SaveDeviceTokenRequest
from courier.application.dto.responses import MessageResponse
from courier.application.notifications.push_service import PushNotificationService
from courier.application.use_cases.errors import UserNotFoundError
from courier.domain.common.ids import UserId


class RegisterDeviceToken:
    def __init__(self, push_service: PushNotificationService) -> None:
        self._push_service = push_service

    async def execute(self, user_id: UserId, request_dto: SaveDeviceTokenRequest) -> MessageResponse:
        saved = await self._push_service.save_token(user_id, request_dto.fcm_token)
        if not saved:
            raise UserNotFoundError(f"user {user_id} not found")
        return MessageResponse(message="FCM token saved successfully")
