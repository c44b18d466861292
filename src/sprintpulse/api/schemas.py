from typing import Any, Dict, List, Optional
from datetime import date
from pydantic import BaseModel, Field

# Required fields are Optional here and checked by the services,
# so a missing field answers 400 rather than a schema error.


class CamelModel(BaseModel):
    class Config:
        populate_by_name = True

# --- Tasks ---

class TaskCreate(BaseModel):
    team_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    story_points: Optional[int] = None
    status: Optional[str] = None
    assignee_id: Optional[str] = None
    due_date: Optional[date] = None

class TaskStatusUpdate(BaseModel):
    status: Optional[str] = None

class TaskUpdate(BaseModel):
    # Only the fields sent are applied; a null sprint_id moves the task to the backlog
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    story_points: Optional[int] = None
    assignee_id: Optional[str] = None
    due_date: Optional[date] = None
    sprint_id: Optional[str] = None

class CommentCreate(BaseModel):
    content: Optional[str] = None

class SprintTaskCreate(BaseModel):
    sprint_id: Optional[str] = None
    task_id: Optional[str] = None

# --- Sprints ---

class SprintCreate(BaseModel):
    team_id: Optional[str] = None
    name: Optional[str] = None
    goal: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    task_ids: List[str] = Field(default_factory=list)

# --- Analytics ---

class PerformanceMetricsRequest(CamelModel):
    team_ids: List[str] = Field(default_factory=list, alias="teamIds")
    time_range: Optional[int] = Field(None, alias="timeRange")

class PredictiveAnalyticsRequest(CamelModel):
    sprint_id: Optional[str] = Field(None, alias="sprintId")
    team_ids: List[str] = Field(default_factory=list, alias="teamIds")

class RetrospectiveRequest(CamelModel):
    sprint_id: Optional[str] = Field(None, alias="sprintId")

# --- Generative analyses over caller-supplied data ---

class RiskHeatmapRequest(CamelModel):
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    team_members: List[Dict[str, Any]] = Field(default_factory=list, alias="teamMembers")
    current_date: Optional[str] = Field(None, alias="currentDate")

class ScopeCheckRequest(CamelModel):
    original_tasks: List[Dict[str, Any]] = Field(default_factory=list, alias="originalTasks")
    current_tasks: List[Dict[str, Any]] = Field(default_factory=list, alias="currentTasks")
    sprint_start_date: Optional[str] = Field(None, alias="sprintStartDate")
    sprint_name: Optional[str] = Field(None, alias="sprintName")

class SprintPlanRequest(CamelModel):
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    team_capacity: Optional[float] = Field(None, alias="teamCapacity")
    sprint_duration: Optional[int] = Field(None, alias="sprintDuration")
