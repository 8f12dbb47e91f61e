from __future__ import annotations

import datetime
from typing import Literal

import pydantic

from src.models.schemas.aptitude import AptitudeTopicEnum
from src.models.schemas.base import BaseSchemaModel


BadgeTier = Literal["Bronze", "Silver", "Gold"]


class BadgeDefinition(BaseSchemaModel):
    id: str
    name: str
    description: str
    icon: str
    tier: BadgeTier


class BadgeOut(BadgeDefinition):
    earned: bool = False
    earned_at: datetime.datetime | None = None


class BadgeTierGroup(BaseSchemaModel):
    tier: BadgeTier
    badges: list[BadgeOut]


class BadgeBoardResponse(BaseSchemaModel):
    earned_count: int
    total_count: int
    tiers: list[BadgeTierGroup]


class EarnedBadgesResponse(BaseSchemaModel):
    items: list[BadgeOut]


class UserProfileOut(BaseSchemaModel):
    user_id: str
    streak: int = pydantic.Field(ge=0)
    last_activity_date: datetime.datetime | None = None


class GoalCreate(BaseSchemaModel):
    topic: AptitudeTopicEnum
    target_accuracy: float = pydantic.Field(ge=0.0, le=100.0)
    deadline: datetime.datetime


class GoalFromTextRequest(BaseSchemaModel):
    goal_text: str = pydantic.Field(description="e.g. 'Improve in Logical Reasoning in 2 weeks'")


class GoalOut(BaseSchemaModel):
    id: int
    user_id: str
    topic: str
    target_accuracy: float
    initial_accuracy: float
    current_accuracy: float
    start_date: datetime.datetime
    end_date: datetime.datetime
    is_active: bool


class ActiveGoalResponse(BaseSchemaModel):
    goal: GoalOut | None = None


class DashboardResponse(BaseSchemaModel):
    streak: int
    last_activity_date: datetime.datetime | None = None
    active_goal: GoalOut | None = None
    earned_badges: list[BadgeOut]
    revision_count: int
    sessions_completed: int
