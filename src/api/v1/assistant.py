"""
Assistant endpoints: chat widget, code review and sprint retrospective.
"""

from typing import Any, Optional, Union

from fastapi import APIRouter, Depends

from src.api.deps import get_assistant_service
from src.domain.document import WireModel
from src.services.assistant_service import AssistantService

router = APIRouter()


class ChatRequest(WireModel):
    mode: Optional[str] = None
    messages: list[Any] = []


class ChatResponse(WireModel):
    reply: str


class CodeReviewRequest(WireModel):
    code: str = ""
    language: Optional[str] = None
    focus: Optional[str] = None


class RetroRequest(WireModel):
    sprint_name: Optional[str] = None
    team_name: Optional[str] = None
    feedback: Union[str, list[Any], None] = None


@router.post("/api/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> ChatResponse:
    """
    Answer the chat widget in Scrum-coach or in-app help mode.
    """
    reply = await service.chat(request.mode, request.messages)
    return ChatResponse(reply=reply)


@router.post("/code-review")
async def code_review(
    request: CodeReviewRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> dict[str, Any]:
    return await service.review_code(request.code, language=request.language, focus=request.focus)


@router.post("/sprint-retro-analyze")
async def sprint_retro_analyze(
    request: RetroRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> dict[str, Any]:
    """
    Summarize retrospective feedback into themes and action items.
    """
    return await service.analyze_retro(
        request.feedback,
        sprint_name=request.sprint_name,
        team_name=request.team_name,
    )
