"""
API dependencies for dependency injection.
"""

from typing import Optional

from src.core.config import settings
from src.llm.client import LLMClient
from src.repositories.cache_repo import FieldCatalogCache
from src.repositories.file_repo import GeneratedFileRepository
from src.services.assistant_service import AssistantService
from src.services.automation_service import AtlassianClientFactory, AutomationService
from src.services.drafting_service import DraftingService
from src.services.email_service import EmailService
from src.services.template_service import TemplateService
from src.services.user_story_service import UserStoryService


class ServiceContainer:
    """
    Container for all application services.
    Provides singleton instances of services.
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        self._initialized = False

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def initialize(self) -> None:
        """Initialize all services."""
        if self._initialized:
            return

        # Shared clients and state
        self._llm_client = LLMClient(settings.openai)
        self._field_cache = FieldCatalogCache()
        self._file_repository = GeneratedFileRepository(settings.storage.generated_dir)
        self._client_factory = AtlassianClientFactory(
            field_cache=self._field_cache,
            timeout=settings.atlassian.timeout,
        )

        # Initialize services
        self._automation_service = AutomationService(
            llm=self._llm_client,
            clients=self._client_factory,
            env=settings.atlassian.as_env(),
        )
        self._drafting_service = DraftingService(self._llm_client)
        self._user_story_service = UserStoryService(self._llm_client, self._file_repository)
        self._template_service = TemplateService()
        self._email_service = EmailService(settings.email, self._file_repository)
        self._assistant_service = AssistantService(self._llm_client)

        self._initialized = True

    @property
    def llm_client(self) -> LLMClient:
        """Get the completion client."""
        self.initialize()
        return self._llm_client

    @property
    def field_cache(self) -> FieldCatalogCache:
        """Get the Jira field-catalog cache."""
        self.initialize()
        return self._field_cache

    @property
    def automation_service(self) -> AutomationService:
        """Get the automation service."""
        self.initialize()
        return self._automation_service

    @property
    def drafting_service(self) -> DraftingService:
        self.initialize()
        return self._drafting_service

    @property
    def user_story_service(self) -> UserStoryService:
        self.initialize()
        return self._user_story_service

    @property
    def template_service(self) -> TemplateService:
        self.initialize()
        return self._template_service

    @property
    def email_service(self) -> EmailService:
        self.initialize()
        return self._email_service

    @property
    def assistant_service(self) -> AssistantService:
        self.initialize()
        return self._assistant_service


# Singleton container instance
container = ServiceContainer.get_instance()


# Dependency functions for FastAPI
def get_llm_client() -> LLMClient:
    """Get the completion client instance."""
    return container.llm_client


def get_automation_service() -> AutomationService:
    """Get the automation service instance."""
    return container.automation_service


def get_drafting_service() -> DraftingService:
    return container.drafting_service


def get_user_story_service() -> UserStoryService:
    return container.user_story_service


def get_template_service() -> TemplateService:
    return container.template_service


def get_email_service() -> EmailService:
    return container.email_service


def get_assistant_service() -> AssistantService:
    return container.assistant_service
