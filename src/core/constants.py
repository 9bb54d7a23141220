"""
System-wide constants for the PM doc automation service.
"""

from enum import Enum


# =============================================================================
# Enums
# =============================================================================


class MessageRole(str, Enum):
    """Message roles in a completion conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMode(str, Enum):
    """Personas offered by the chat assistant."""

    SCRUM = "scrum"
    APP = "app"


# =============================================================================
# Backlog Constants
# =============================================================================

DEFAULT_PRIORITY_SCHEME = "P0,P1,P2,P3"
ALLOWED_PRIORITIES = ("P0", "P1", "P2", "P3")
DEFAULT_PRIORITY = "P2"

ALLOWED_STORY_POINTS = (1, 2, 3, 5, 8, 13)
DEFAULT_STORY_POINTS = 3

# The XLSX estimator also allows 20, as agile teams commonly do
ESTIMATE_STORY_POINTS = (1, 2, 3, 5, 8, 13, 20)

DEFAULT_EPIC_NAME = "General Functional Requirements"

# =============================================================================
# Document Generation Constants
# =============================================================================

DEFAULT_PROJECT_NAME = "Untitled Project"
UNTITLED_DOCUMENT = "Untitled Document"

OVERVIEW_EXCERPT_CHARS = 1200
NO_REQUIREMENTS_TEXT = "(No requirements provided)"
AUTO_GENERATED_NOTE = (
    "This document was generated automatically because the model returned no "
    "usable content. Review the requirements and regenerate, or complete the "
    "sections manually."
)
EMPTY_SECTION_BODY = "(To be completed)"

FILE_CONTENT_MARKER = "[FILE_CONTENT]"

DOC_PACK_TITLE_PREFIX = "PM Doc Pack – "

# Human-readable names keyed by the output.docs key
DOC_LABELS = {
    "brd": "Business Requirements Document",
    "frs": "Functional Requirements Specification",
    "sow": "Statement of Work",
    "raid": "RAID Log",
}

RAID_CATEGORIES = ("risks", "assumptions", "issues", "dependencies")

# =============================================================================
# Atlassian Constants
# =============================================================================

CONFLUENCE_API_PATH = "/rest/api"
JIRA_API_PATH = "/rest/api/3"
EPIC_LINK_FIELD_NAME = "Epic Link"
ATLASSIAN_CLOUD_SUFFIX = ".atlassian.net"

# =============================================================================
# Files
# =============================================================================

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
TEXT_EXTENSIONS = (".txt", ".md", ".markdown", ".csv", ".json")

GENERATED_FILE_HEADER = "X-Generated-File-Id"

# =============================================================================
# Chat
# =============================================================================

CHAT_HISTORY_TURNS = 12
