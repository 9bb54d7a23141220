"""
Conversational helpers: chat assistant, code review and sprint retrospective.
"""

from typing import Any, Optional, Sequence

from src.core.constants import CHAT_HISTORY_TURNS, ChatMode, MessageRole
from src.core.exceptions import ValidationError
from src.core.logging import get_logger
from src.core.text import as_text, ensure_list
from src.llm.client import LLMClient, Message
from src.llm.prompts import CHAT_PROMPTS, CODE_REVIEW_PROMPTS, RETRO_PROMPTS

logger = get_logger(__name__)

SEVERITIES = ("high", "medium", "low")


def _strings(value: Any) -> list[str]:
    return [item.strip() for item in ensure_list(value) if isinstance(item, str) and item.strip()]


def _clamp_score(value: Any) -> Optional[int]:
    try:
        score = round(float(value))
    except (TypeError, ValueError):
        return None
    return max(1, min(10, score))


def _line_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        line = int(value)
    except (TypeError, ValueError):
        return None
    return line if line > 0 else None


class AssistantService:
    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    @staticmethod
    def chat_history(messages: Sequence[Any]) -> list[Message]:
        """Last turns of user/assistant messages; other roles are dropped."""
        history = []
        for raw in messages:
            if not isinstance(raw, dict):
                continue
            content = as_text(raw.get("content"))
            role = as_text(raw.get("role")).lower()
            if not content or role not in (MessageRole.USER.value, MessageRole.ASSISTANT.value):
                continue
            history.append(Message(MessageRole(role), content))
        return history[-CHAT_HISTORY_TURNS:]

    async def chat(self, mode: Optional[str], messages: Sequence[Any]) -> str:
        history = self.chat_history(messages)
        if not history:
            raise ValidationError("Please provide at least one message.", field="messages")

        try:
            persona = ChatMode((mode or ChatMode.SCRUM.value).strip().lower())
        except ValueError:
            persona = ChatMode.SCRUM

        reply = await self.llm.complete(
            [Message.system(CHAT_PROMPTS[persona.value].strip()), *history],
            temperature=0.5,
        )
        logger.info("Chat reply generated", mode=persona.value, turns=len(history))
        return reply.strip()

    # -------------------------------------------------------------------------
    # Code review
    # -------------------------------------------------------------------------

    async def review_code(
        self,
        code: str,
        language: Optional[str] = None,
        focus: Optional[str] = None,
    ) -> dict[str, Any]:
        if not code or not code.strip():
            raise ValidationError("Please provide some code to review.", field="code")

        prompt = CODE_REVIEW_PROMPTS["user"].format(
            language=language or "auto-detect",
            focus=focus or "general quality, bugs, security and readability",
            code=code,
        )
        data = await self.llm.complete_json(
            [Message.system(CODE_REVIEW_PROMPTS["system"].strip()), Message.user(prompt.strip())]
        )

        issues = []
        for raw in ensure_list(data.get("issues")):
            if not isinstance(raw, dict) or not as_text(raw.get("description")):
                continue
            severity = as_text(raw.get("severity")).lower()
            issues.append(
                {
                    "severity": severity if severity in SEVERITIES else "medium",
                    "line": _line_number(raw.get("line")),
                    "description": as_text(raw.get("description")),
                    "suggestion": as_text(raw.get("suggestion")),
                }
            )

        return {
            "summary": as_text(data.get("summary")),
            "score": _clamp_score(data.get("score")),
            "issues": issues,
            "strengths": _strings(data.get("strengths")),
        }

    # -------------------------------------------------------------------------
    # Sprint retrospective
    # -------------------------------------------------------------------------

    async def analyze_retro(
        self,
        feedback: Any,
        sprint_name: Optional[str] = None,
        team_name: Optional[str] = None,
    ) -> dict[str, Any]:
        if isinstance(feedback, list):
            text = "\n".join(f"- {as_text(item)}" for item in feedback if as_text(item))
        else:
            text = as_text(feedback)
        if not text:
            raise ValidationError("Please provide retrospective feedback.", field="feedback")

        prompt = RETRO_PROMPTS["user"].format(
            team_name=team_name or "[Not Provided]",
            sprint_name=sprint_name or "[Not Provided]",
            feedback=text,
        )
        data = await self.llm.complete_json(
            [Message.system(RETRO_PROMPTS["system"].strip()), Message.user(prompt.strip())]
        )

        action_items = []
        for raw in ensure_list(data.get("actionItems")):
            if isinstance(raw, str) and raw.strip():
                action_items.append({"item": raw.strip(), "owner": ""})
            elif isinstance(raw, dict) and as_text(raw.get("item")):
                action_items.append({"item": as_text(raw["item"]), "owner": as_text(raw.get("owner"))})

        return {
            "summary": as_text(data.get("summary")),
            "wentWell": _strings(data.get("wentWell")),
            "toImprove": _strings(data.get("toImprove")),
            "actionItems": action_items,
            "themes": _strings(data.get("themes")),
        }
