"""Router for the Chat feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from api.features.chat.controller import ChatController
from api.features.chat.dtos import HistoryResponse, SendMessageRequest, SendMessageResponse
from api.features.chat.exceptions import MissingSessionIdError
from api.shared.dtos import ErrorResponse
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.post(
    "/message",
    response_model=SendMessageResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@inject
async def send_message(
    request: SendMessageRequest,
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
):
    """Store the user's message, generate a reply and store it too."""
    return await controller.send_message(request)


@router.get(
    "/history/{session_id}",
    response_model=HistoryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
@inject
async def get_history(
    session_id: str,
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
):
    """Return every message of a session, oldest first."""
    return await controller.get_history(session_id)


@router.get("/history", include_in_schema=False)
@router.get("/history/", include_in_schema=False)
async def get_history_without_session():
    raise MissingSessionIdError()
