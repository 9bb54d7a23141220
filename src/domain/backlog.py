"""
Backlog domain models: epics and the stories that hang off them.
"""

from pydantic import Field

from src.core.constants import DEFAULT_PRIORITY, DEFAULT_STORY_POINTS
from src.domain.document import WireModel


class BacklogEpic(WireModel):
    """Epic identified by its name."""

    name: str = Field(..., min_length=1)
    description: str = ""


class BacklogStory(WireModel):
    """User story linked to an epic by name."""

    epic_name: str = ""
    summary: str
    story: str = ""
    acceptance_criteria: list[str] = Field(default_factory=list)
    priority: str = DEFAULT_PRIORITY
    story_points: int = DEFAULT_STORY_POINTS


class Backlog(WireModel):
    epics: list[BacklogEpic] = Field(default_factory=list)
    stories: list[BacklogStory] = Field(default_factory=list)


class UserStory(WireModel):
    """Story as produced from a BRD: epic name and story text only."""

    epic: str = ""
    story: str = ""


class UserStorySet(WireModel):
    epics: list[BacklogEpic] = Field(default_factory=list)
    user_stories: list[UserStory] = Field(default_factory=list)
