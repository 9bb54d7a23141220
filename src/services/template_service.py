"""
DOCX template filling with docxtpl.

Templates use Jinja placeholders named after the form fields, e.g.
``{{ projectName }}`` or ``{{ background }}``.
"""

import asyncio
import io
from typing import Mapping, Optional
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docxtpl import DocxTemplate, Listing
from jinja2 import TemplateError

from src.core.exceptions import DocAutomationError, ValidationError
from src.core.logging import get_logger
from src.core.text import slugify

logger = get_logger(__name__)

TEMPLATE_FIELDS = (
    "projectName",
    "clientName",
    "preparedBy",
    "date",
    "version",
    "docType",
    "background",
    "objectives",
    "inScope",
    "outScope",
    "stakeholders",
    "highLevelReqs",
    "assumptions",
    "risks",
)


def build_context(fields: Mapping[str, Optional[str]], attachment_text: str = "") -> dict[str, object]:
    """
    Template context from the form fields.

    The free-text ``requirements`` field is exposed as ``requirementsTextArea``;
    ``requirements`` holds the text of the uploaded attachment.
    """
    context: dict[str, object] = {name: (fields.get(name) or "") for name in TEMPLATE_FIELDS}
    context["requirementsTextArea"] = fields.get("requirements") or ""
    context["requirements"] = attachment_text
    # Multi-line values keep their line breaks in the document
    return {
        key: Listing(value) if isinstance(value, str) and "\n" in value else value
        for key, value in context.items()
    }


def output_filename(project_name: Optional[str], doc_type: Optional[str]) -> str:
    return f"{slugify(project_name or '', fallback='document')}-{doc_type or 'brd'}-generated.docx"


def _render(template: bytes, context: dict[str, object]) -> bytes:
    try:
        Document(io.BytesIO(template))
    except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as e:
        raise ValidationError("Invalid DOCX template file.", field="templateDocx") from e

    try:
        doc = DocxTemplate(io.BytesIO(template))
        doc.render(context)
    except TemplateError as e:
        raise DocAutomationError(
            "Error rendering DOCX template. Check that placeholders in the template "
            f"match field names. {e}",
            code="TEMPLATE_RENDER_ERROR",
            status_code=500,
        ) from e

    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


class TemplateService:
    async def render(self, template: bytes, context: dict[str, object]) -> bytes:
        """
        Fill a DOCX template.

        Raises:
            ValidationError: the template is not a readable .docx (400)
            DocAutomationError: rendering failed (500)
        """
        if not template:
            raise ValidationError("No DOCX template uploaded.", field="templateDocx")
        content = await asyncio.to_thread(_render, template, context)
        logger.info("Template rendered", size=len(content))
        return content
