from __future__ import annotations

from fastapi import APIRouter, Depends

from courier.api.security import current_actor
from courier.api.services import AppServices, get_services
from courier.application.dto.requests import SaveDeviceTokenRequest
from courier.application.dto.responses import MessageResponse
from courier.application.use_cases.register_device_token import RegisterDeviceToken
from courier.domain.party.entities import Actor

router = APIRouter(prefix="/notifications")


@router.post("/fcm-token", response_model=MessageResponse)
async def save_fcm_token(
    request_dto: SaveDeviceTokenRequest,
    actor: Actor = Depends(current_actor),
    services: AppServices = Depends(get_services),
) -> MessageResponse:
    use_case = RegisterDeviceToken(push_service=services.push_service)
    return await use_case.execute(user_id=actor.user_id, request_dto=request_dto)
