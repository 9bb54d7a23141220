"""
Service layer implementations.
"""

from src.services.assistant_service import AssistantService
from src.services.automation_service import AtlassianClientFactory, AutomationService, UploadedFile
from src.services.drafting_service import DraftingService
from src.services.email_service import EmailService
from src.services.template_service import TemplateService
from src.services.user_story_service import UserStoryService

__all__ = [
    "AssistantService",
    "AtlassianClientFactory",
    "AutomationService",
    "DraftingService",
    "EmailService",
    "TemplateService",
    "UploadedFile",
    "UserStoryService",
]
