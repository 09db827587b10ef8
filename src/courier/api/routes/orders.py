from __future__ import annotations

from fastapi import APIRouter, Depends, status

from courier.api.middleware.request_id import get_request_id
from courier.api.security import current_actor, require_role
from courier.api.services import AppServices, get_services
from courier.application.dto.requests import CreateOrderRequest, UpdateOrderStatusRequest
from courier.application.dto.responses import OrderResponse, OrdersResponse
from courier.application.use_cases.accept_order import AcceptOrder
from courier.application.use_cases.assign_rider import AssignRider
from courier.application.use_cases.cancel_order import CancelOrder
from courier.application.use_cases.context import TraceContext
from courier.application.use_cases.create_order import CreateOrder
from courier.application.use_cases.get_order import GetOrder
from courier.application.use_cases.list_orders import ListOrders
from courier.application.use_cases.update_order_status import UpdateOrderStatus
from courier.domain.common.ids import OrderId
from courier.domain.order.entities import OrderStatus
from courier.domain.party.entities import Actor, Role
from courier.infrastructure.observability.otel import current_trace_id

router = APIRouter(prefix="/orders")


def _trace_ctx() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())


def _update_order_status_use_case(services: AppServices) -> UpdateOrderStatus:
    return UpdateOrderStatus(
        order_repository=services.order_repository,
        party_directory=services.party_directory,
        fanout=services.fanout,
    )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request_dto: CreateOrderRequest,
    actor: Actor = Depends(require_role(Role.USER)),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    use_case = CreateOrder(
        order_repository=services.order_repository,
        menu_repository=services.menu_repository,
        party_directory=services.party_directory,
        fanout=services.fanout,
    )
    return await use_case.execute(
        customer_id=actor.user_id,
        request_dto=request_dto,
        trace_ctx=_trace_ctx(),
    )


@router.get("", response_model=OrdersResponse)
async def list_orders(
    actor: Actor = Depends(current_actor),
    services: AppServices = Depends(get_services),
) -> OrdersResponse:
    use_case = ListOrders(
        order_repository=services.order_repository,
        party_directory=services.party_directory,
    )
    return await use_case.execute(actor=actor)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    actor: Actor = Depends(current_actor),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    use_case = GetOrder(
        order_repository=services.order_repository,
        party_directory=services.party_directory,
    )
    return await use_case.execute(order_id=OrderId(order_id), actor=actor)


@router.put("/{order_id}/accept", response_model=OrderResponse)
async def accept_order(
    order_id: str,
    actor: Actor = Depends(require_role(Role.RESTAURANT)),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    use_case = AcceptOrder(
        order_repository=services.order_repository,
        party_directory=services.party_directory,
        fanout=services.fanout,
    )
    return await use_case.execute(
        owner_id=actor.user_id,
        order_id=OrderId(order_id),
        trace_ctx=_trace_ctx(),
    )


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    request_dto: UpdateOrderStatusRequest,
    actor: Actor = Depends(current_actor),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    return await _update_order_status_use_case(services).execute(
        order_id=OrderId(order_id),
        new_status=request_dto.status,
        actor=actor,
        trace_ctx=_trace_ctx(),
    )


@router.put("/{order_id}/assign-rider", response_model=OrderResponse)
async def assign_rider(
    order_id: str,
    actor: Actor = Depends(require_role(Role.RIDER)),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    use_case = AssignRider(
        order_repository=services.order_repository,
        party_directory=services.party_directory,
        fanout=services.fanout,
    )
    return await use_case.execute(
        rider_user_id=actor.user_id,
        order_id=OrderId(order_id),
        trace_ctx=_trace_ctx(),
    )


@router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    actor: Actor = Depends(current_actor),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    use_case = CancelOrder(
        order_repository=services.order_repository,
        party_directory=services.party_directory,
        fanout=services.fanout,
    )
    return await use_case.execute(order_id=OrderId(order_id), actor=actor, trace_ctx=_trace_ctx())


@router.put("/{order_id}/ready-for-pickup", response_model=OrderResponse)
async def mark_ready_for_pickup(
    order_id: str,
    actor: Actor = Depends(require_role(Role.RESTAURANT)),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    return await _update_order_status_use_case(services).execute(
        order_id=OrderId(order_id),
        new_status=OrderStatus.READY_FOR_PICKUP,
        actor=actor,
        trace_ctx=_trace_ctx(),
    )


@router.put("/{order_id}/pickup", response_model=OrderResponse)
async def pickup_order(
    order_id: str,
    actor: Actor = Depends(require_role(Role.RIDER)),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    return await _update_order_status_use_case(services).execute(
        order_id=OrderId(order_id),
        new_status=OrderStatus.ON_THE_WAY,
        actor=actor,
        trace_ctx=_trace_ctx(),
    )


@router.put("/{order_id}/deliver", response_model=OrderResponse)
async def deliver_order(
    order_id: str,
    actor: Actor = Depends(require_role(Role.RIDER)),
    services: AppServices = Depends(get_services),
) -> OrderResponse:
    return await _update_order_status_use_case(services).execute(
        order_id=OrderId(order_id),
        new_status=OrderStatus.DELIVERED,
        actor=actor,
        trace_ctx=_trace_ctx(),
    )
