"""Response contracts for the generative analyses, using the wire field names."""

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field

RiskLevel = Literal["high", "medium", "low"]


# --- Risk heatmap ---

class OverloadedMember(BaseModel):
    memberId: str
    memberName: str
    taskCount: int
    totalStoryPoints: float
    riskLevel: RiskLevel
    reason: str


class DelayedTask(BaseModel):
    taskId: str
    taskTitle: str
    daysOverdue: int
    riskLevel: RiskLevel


class BlockedTask(BaseModel):
    taskId: str
    taskTitle: str
    blockingReason: str
    riskLevel: RiskLevel


class RiskHeatmap(BaseModel):
    overloadedMembers: List[OverloadedMember] = Field(default_factory=list)
    delayedTasks: List[DelayedTask] = Field(default_factory=list)
    blockedTasks: List[BlockedTask] = Field(default_factory=list)
    recommendations: List[str]


# --- Scope check ---

class AddedTask(BaseModel):
    taskId: str
    taskTitle: str
    storyPoints: Optional[float] = None
    addedDate: Optional[str] = None


class RemovedTask(BaseModel):
    taskId: str
    taskTitle: str
    storyPoints: Optional[float] = None


class ScopeAnalysis(BaseModel):
    scopeCreepDetected: bool
    scopeIncreasePercentage: float
    addedTasks: List[AddedTask] = Field(default_factory=list)
    removedTasks: List[RemovedTask] = Field(default_factory=list)
    originalStoryPoints: float
    currentStoryPoints: float
    netStoryPointsChange: float
    riskLevel: RiskLevel
    recommendations: List[str]
    warning: Optional[str] = None
    impactAssessment: Optional[str] = None


# --- Sprint plan ---

class WorkloadShare(BaseModel):
    memberId: str
    tasks: List[str]
    storyPoints: float


class SprintPlanSuggestion(BaseModel):
    sprintName: str
    recommendedTasks: List[str]
    totalStoryPoints: float
    estimatedCompletion: Union[str, float]
    workloadDistribution: List[WorkloadShare] = Field(default_factory=list)
    reasoning: Optional[str] = None
