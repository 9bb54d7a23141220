"""
Document file endpoints: DOCX templates, user stories, Excel export and e-mail.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import Response
from starlette.datastructures import UploadFile as StarletteUploadFile

from src.api.deps import get_email_service, get_template_service, get_user_story_service
from src.core.constants import DOCX_MIME, GENERATED_FILE_HEADER, XLSX_MIME
from src.core.exceptions import ValidationError
from src.core.logging import get_logger
from src.domain.document import WireModel
from src.services.email_service import EmailService
from src.services.template_service import TemplateService, build_context, output_filename
from src.services.text_extraction import docx_to_text, extract_text
from src.services.user_story_service import UserStoryService

logger = get_logger(__name__)

router = APIRouter()


class UserStoriesXlsxRequest(WireModel):
    """Stories to export, with optional sprint calendar."""

    project_name: Optional[str] = None
    user_stories: list[Any] = []
    sprint_length_weeks: Optional[Any] = None
    sprint_start: Optional[str] = None
    sprint_end: Optional[str] = None


class EmailDocRequest(WireModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    text: Optional[str] = None
    file_id: Optional[str] = None


def attachment(content: bytes, filename: str, media_type: str, headers: Optional[dict[str, str]] = None) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"', **(headers or {})},
    )


@router.post("/generate-docx")
async def generate_docx(
    request: Request,
    service: TemplateService = Depends(get_template_service),
) -> Response:
    """
    Fill an uploaded DOCX template with the submitted fields.

    The optional ``requirementsFile`` is converted to text and exposed to the
    template as ``requirements``.
    """
    form = await request.form()
    template = form.get("templateDocx")
    if not isinstance(template, StarletteUploadFile):
        raise ValidationError("No DOCX template uploaded.", field="templateDocx")

    attachment_text = ""
    requirements_file = form.get("requirementsFile")
    if isinstance(requirements_file, StarletteUploadFile) and requirements_file.filename:
        attachment_text = extract_text(
            requirements_file.filename,
            await requirements_file.read(),
            requirements_file.content_type,
            strict=False,
        )

    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    content = await service.render(await template.read(), build_context(fields, attachment_text))
    filename = output_filename(fields.get("projectName"), fields.get("docType"))

    logger.info("DOCX generated", filename=filename)
    return attachment(content, filename, DOCX_MIME)


@router.post("/generate-user-stories")
async def generate_user_stories(
    brdDocx: Optional[UploadFile] = File(default=None),
    brdText: Optional[str] = Form(default=None),
    projectName: Optional[str] = Form(default=None),
    docType: Optional[str] = Form(default=None),
    service: UserStoryService = Depends(get_user_story_service),
) -> dict[str, Any]:
    """
    Generate user stories grouped into epics from a BRD.
    """
    brd_text = brdText or ""
    if brdDocx is not None and brdDocx.filename:
        if not brdDocx.filename.lower().endswith(".docx"):
            raise ValidationError("Please upload a .docx BRD file.", field="brdDocx")
        try:
            brd_text = docx_to_text(await brdDocx.read())
        except ValueError as e:
            raise ValidationError(
                "Could not extract text from the uploaded BRD DOCX. Please check the file.",
                field="brdDocx",
            ) from e

    result = await service.generate(brd_text, project_name=projectName, doc_type=docType)
    return result.to_wire()


@router.post("/user-stories-xlsx")
async def user_stories_xlsx(
    request: UserStoriesXlsxRequest,
    service: UserStoryService = Depends(get_user_story_service),
) -> Response:
    """
    Export user stories to Excel with AI story points and a sprint plan.

    The file is kept on the server; its id is returned in the
    ``X-Generated-File-Id`` header for ``/email-doc``.
    """
    export = await service.export_xlsx(
        request.user_stories,
        project_name=request.project_name,
        sprint_length_weeks=request.sprint_length_weeks,
        sprint_start=request.sprint_start,
        sprint_end=request.sprint_end,
    )
    return attachment(
        export.content,
        export.filename,
        XLSX_MIME,
        headers={GENERATED_FILE_HEADER: export.stored.file_id},
    )


@router.post("/email-doc")
async def email_doc(
    request: EmailDocRequest,
    service: EmailService = Depends(get_email_service),
) -> dict[str, bool]:
    """
    E-mail a previously generated file.
    """
    await service.send_generated_file(
        request.to,
        request.file_id,
        subject=request.subject,
        text=request.text,
    )
    return {"success": True}
