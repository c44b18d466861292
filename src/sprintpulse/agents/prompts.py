"""
Prompt builders for the generative sprint analyses.

Each builder embeds the caller's data as indented JSON together with the
schema the model must answer in.
"""

import json
from typing import Any


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


RISK_HEATMAP_TEMPLATE = """
Analyze the following sprint data and identify risks:

Tasks:
{tasks}

Team Members:
{team_members}

Current Date: {current_date}

Identify risks and respond with a single JSON object:
{{
  "overloadedMembers": [
    {{
      "memberId": "member_id",
      "memberName": "member_name",
      "taskCount": number,
      "totalStoryPoints": number,
      "riskLevel": "high|medium|low",
      "reason": "explanation"
    }}
  ],
  "delayedTasks": [
    {{
      "taskId": "task_id",
      "taskTitle": "task_title",
      "daysOverdue": number,
      "riskLevel": "high|medium|low"
    }}
  ],
  "blockedTasks": [
    {{
      "taskId": "task_id",
      "taskTitle": "task_title",
      "blockingReason": "inferred reason",
      "riskLevel": "high|medium|low"
    }}
  ],
  "recommendations": ["recommendation1", "recommendation2"]
}}

Risk criteria:
- Overloaded: >5 tasks or >20 story points per person
- Delayed: Tasks past due date
- Blocked: Tasks with status 'todo' for >3 days or high priority tasks not started
- High risk: Critical issues requiring immediate attention
- Medium risk: Issues that should be addressed soon
- Low risk: Minor concerns to monitor

Provide actionable recommendations for improving team efficiency and reducing risks.
"""


SCOPE_CHECK_TEMPLATE = """
Analyze scope creep in this sprint:

Sprint Name: {sprint_name}
Sprint Start Date: {sprint_start_date}

Original Sprint Tasks (at start):
{original_tasks}

Current Sprint Tasks:
{current_tasks}

Respond with a single JSON object:
{{
  "scopeCreepDetected": boolean,
  "scopeIncreasePercentage": number,
  "addedTasks": [
    {{
      "taskId": "task_id",
      "taskTitle": "task_title",
      "storyPoints": number,
      "addedDate": "date"
    }}
  ],
  "removedTasks": [
    {{
      "taskId": "task_id",
      "taskTitle": "task_title",
      "storyPoints": number
    }}
  ],
  "originalStoryPoints": number,
  "currentStoryPoints": number,
  "netStoryPointsChange": number,
  "riskLevel": "low|medium|high",
  "recommendations": ["recommendation1", "recommendation2"],
  "warning": "Warning message if scope creep > 15%",
  "impactAssessment": "Assessment of how scope changes affect sprint goals"
}}

Criteria:
- Scope creep detected if story points increased by >15%
- High risk if >25% increase
- Medium risk if 15-25% increase
- Low risk if <15% increase
- Consider both additions and removals
- Assess impact on sprint goals and team capacity
- Provide specific recommendations for managing scope
"""


SPRINT_PLAN_TEMPLATE = """
You are a sprint planning assistant. Given the following information, suggest an optimal sprint plan:

Tasks:
{tasks}

Team Capacity: {team_capacity} hours total
Sprint Duration: {sprint_duration} days

Respond with a single JSON object:
{{
  "sprintName": "Suggested sprint name",
  "recommendedTasks": ["task_id_1", "task_id_2"],
  "totalStoryPoints": number,
  "estimatedCompletion": "percentage",
  "workloadDistribution": [
    {{
      "memberId": "member_id",
      "tasks": ["task_id"],
      "storyPoints": number
    }}
  ],
  "reasoning": "Brief explanation of the recommendation"
}}

Consider:
- Task priorities (high priority tasks should be included)
- Story point estimates vs team capacity
- Balanced workload distribution
- Sprint goal alignment

For the sprint name, suggest something descriptive based on the tasks selected, like "Sprint 16 - Authentication & Performance".
"""


RETROSPECTIVE_TEMPLATE = """
Generate a sprint retrospective based on the following data:

Sprint Information:
{sprint}

Sprint Statistics:
- Completion rate: {completion_rate}% ({completed_count} of {total_count} tasks)
- Story points delivered vs planned: {completed_points} / {planned_points}

Completed Tasks ({completed_count}):
{completed_tasks}

Delayed Tasks ({delayed_count}):
{delayed_tasks}

Blocked Tasks ({blocked_count}):
{blocked_tasks}

Write the retrospective in markdown with exactly these sections:

## 🟢 What went well
- Positive outcomes, completed work, collaboration wins, process improvements that worked

## 🔴 What didn't go well
- Delays, blockers, process problems, patterns in unfinished work

## 🛠 Action items for next sprint
- Specific, actionable recommendations; workload balancing where needed

## 📊 Sprint metrics
- Completion rate, story points delivered vs planned, other key indicators

Keep it concise. Use data-driven observations and avoid generic advice.
"""


def risk_heatmap_prompt(tasks: Any, team_members: Any, current_date: str) -> str:
    return RISK_HEATMAP_TEMPLATE.format(
        tasks=_dump(tasks),
        team_members=_dump(team_members),
        current_date=current_date,
    )


def scope_check_prompt(original_tasks: Any, current_tasks: Any, sprint_start_date: Any, sprint_name: Any) -> str:
    return SCOPE_CHECK_TEMPLATE.format(
        sprint_name=sprint_name,
        sprint_start_date=sprint_start_date,
        original_tasks=_dump(original_tasks),
        current_tasks=_dump(current_tasks),
    )


def sprint_plan_prompt(tasks: Any, team_capacity: Any, sprint_duration: Any) -> str:
    return SPRINT_PLAN_TEMPLATE.format(
        tasks=_dump(tasks),
        team_capacity=team_capacity,
        sprint_duration=sprint_duration,
    )


def retrospective_prompt(
    sprint: Any,
    completed_tasks: list,
    delayed_tasks: list,
    blocked_tasks: list,
    total_count: int,
    completion_rate: int,
    planned_points: int,
    completed_points: int,
) -> str:
    return RETROSPECTIVE_TEMPLATE.format(
        sprint=_dump(sprint),
        completion_rate=completion_rate,
        total_count=total_count,
        planned_points=planned_points,
        completed_points=completed_points,
        completed_count=len(completed_tasks),
        completed_tasks=_dump(completed_tasks),
        delayed_count=len(delayed_tasks),
        delayed_tasks=_dump(delayed_tasks),
        blocked_count=len(blocked_tasks),
        blocked_tasks=_dump(blocked_tasks),
    )
