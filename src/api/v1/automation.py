"""
Full automation and requirements drafting endpoints.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from src.api.deps import get_automation_service, get_drafting_service
from src.core.exceptions import ValidationError
from src.core.logging import get_logger
from src.domain.automation import AutomationRequest
from src.domain.document import WireModel
from src.services.automation_service import AutomationService, UploadedFile
from src.services.drafting_service import DraftingService

logger = get_logger(__name__)

router = APIRouter()

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


class DraftRequest(WireModel):
    """Request to structure raw requirements."""

    prompt: Optional[str] = None
    requirements_text: Optional[str] = None
    project_name: Optional[str] = None
    doc_type: Optional[str] = None


class DraftResponse(WireModel):
    parsed: dict[str, str]


def _error_messages(exc: PydanticValidationError) -> list[str]:
    return [
        ".".join(str(part) for part in error["loc"]) + f": {error['msg']}"
        for error in exc.errors()
    ]


async def read_automation_request(request: Request) -> tuple[AutomationRequest, Optional[UploadedFile]]:
    """Parse a multipart/urlencoded form or a JSON body into a typed request."""
    content_type = request.headers.get("content-type", "")
    upload = None

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data: Any = {key: value for key, value in form.items()}
        file = form.get("requirementsFile")
        if isinstance(file, UploadFile) and file.filename:
            upload = UploadedFile(
                filename=file.filename,
                content=await file.read(),
                content_type=file.content_type,
            )
    else:
        try:
            data = await request.json()
        except ValueError as e:
            raise ValidationError("Request body must be JSON or multipart form data.") from e
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")

    try:
        return AutomationRequest.from_form(data), upload
    except PydanticValidationError as e:
        raise ValidationError("Invalid request.", details={"errors": _error_messages(e)}) from e


@router.post("/fully-automate")
async def fully_automate(
    request: Request,
    service: AutomationService = Depends(get_automation_service),
) -> dict[str, Any]:
    """
    Generate BRD, FRS, SOW, RAID and a backlog from requirements, and
    optionally publish them to Confluence and Jira.
    """
    automation_request, upload = await read_automation_request(request)
    logger.info(
        "Full automation requested",
        project_name=automation_request.project_name,
        publish=automation_request.publish,
        has_file=upload is not None,
    )
    response = await service.run(automation_request, upload)
    return response.to_wire()


@router.post("/ai-draft")
async def ai_draft(
    request: DraftRequest,
    service: DraftingService = Depends(get_drafting_service),
) -> dict[str, Any]:
    """
    Structure raw requirements into the fields of a document template.
    """
    parsed = await service.draft(
        request.requirements_text or request.prompt or "",
        project_name=request.project_name,
        doc_type=request.doc_type,
    )
    return DraftResponse(parsed=parsed).to_wire()
