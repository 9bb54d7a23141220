"""
Requirements drafting: raw notes to the field set of a document template.
"""

from typing import Any, Optional

from src.core.exceptions import ValidationError
from src.core.logging import get_logger
from src.llm.client import LLMClient, Message
from src.llm.prompts import DRAFT_DOC_TYPE_INSTRUCTIONS, DRAFT_PROMPTS

logger = get_logger(__name__)

DRAFT_FIELDS = (
    "cleanedRequirements",
    "background",
    "objectives",
    "inScope",
    "outScope",
    "stakeholders",
    "highLevelReqs",
    "assumptions",
    "risks",
)


def _field_text(value: Any) -> str:
    # Models occasionally answer a field with a list of bullet points
    if isinstance(value, list):
        return "\n".join(f"- {item}" for item in value if str(item).strip())
    if isinstance(value, str):
        return value.strip()
    return "" if value is None else str(value)


class DraftingService:
    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    async def draft(
        self,
        requirements_text: str,
        project_name: Optional[str] = None,
        doc_type: Optional[str] = None,
    ) -> dict[str, str]:
        """
        Structure raw requirements into template fields.

        Unknown document types get generic instructions. Fields the model
        leaves out are omitted from the result.

        Raises:
            ValidationError: no requirements text
            LlmParseError: the model answer was not a JSON object
        """
        if not requirements_text or not requirements_text.strip():
            raise ValidationError("Please provide some requirements text for AI.", field="requirementsText")

        normalized_type = (doc_type or "brd").strip().lower()
        instructions = DRAFT_DOC_TYPE_INSTRUCTIONS.get(
            normalized_type, DRAFT_DOC_TYPE_INSTRUCTIONS["other"]
        )
        prompt = DRAFT_PROMPTS["user"].format(
            project_name=project_name or "[Not Provided]",
            doc_type=normalized_type,
            instructions=instructions,
            requirements=requirements_text.strip(),
        )

        data = await self.llm.complete_json(
            [Message.system(DRAFT_PROMPTS["system"].strip()), Message.user(prompt.strip())]
        )
        parsed = {key: _field_text(data[key]) for key in DRAFT_FIELDS if key in data}
        logger.info("Draft generated", doc_type=normalized_type, fields=sorted(parsed))
        return parsed
