from fastapi import APIRouter, HTTPException, Depends, Response, status
from typing import Dict, Any
import logging

from core.database import JSONStorage, DatabaseError
from core.models import Goal
from shared.models import GoalCreate, GoalUpdate, CompletionResponse
from ..dependencies import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/goals", tags=["goals"])

@router.get("", response_model=Dict[str, Any])
def get_all_goals(storage: JSONStorage = Depends(get_storage)):
    """Получить все цели"""
    goals = storage.get_all_goals()
    return {
        "goals": [goal.to_dict() for goal in goals],
        "count": len(goals)
    }

@router.get("/{goal_id}", response_model=Dict[str, Any])
def get_goal(goal_id: int, storage: JSONStorage = Depends(get_storage)):
    goal = storage.get_goal_by_id(goal_id)
    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal.to_dict()

@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
def create_goal(payload: GoalCreate, storage: JSONStorage = Depends(get_storage)):
    """Создать цель; habit_ids не сверяются с привычками"""
    goal = Goal.create(
        title=payload.title,
        description=payload.description,
        target_date=payload.target_date,
        habit_ids=payload.habit_ids
    )

    try:
        created = storage.create_goal(goal)
    except DatabaseError:
        logger.exception("Failed to create goal")
        raise HTTPException(status_code=500, detail="Failed to create goal")

    logger.info(f"Created goal {created.id}: {created.title}")
    return created.to_dict()

@router.put("/{goal_id}", response_model=Dict[str, Any])
def update_goal(goal_id: int, payload: GoalUpdate, storage: JSONStorage = Depends(get_storage)):
    """Обновить цель; состояние выполнения остается прежним"""
    existing = storage.get_goal_by_id(goal_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Goal not found")

    goal = Goal(
        id=goal_id,
        title=payload.title,
        description=payload.description,
        target_date=payload.target_date,
        created_at=existing.created_at,
        completed=existing.completed,
        completed_at=existing.completed_at,
        habit_ids=payload.habit_ids if payload.habit_ids is not None else existing.habit_ids
    )

    try:
        updated = storage.update_goal(goal_id, goal)
    except DatabaseError:
        logger.exception(f"Failed to update goal {goal_id}")
        raise HTTPException(status_code=500, detail="Failed to update goal")

    if updated is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return updated.to_dict()

@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(goal_id: int, storage: JSONStorage = Depends(get_storage)):
    if storage.get_goal_by_id(goal_id) is None:
        raise HTTPException(status_code=404, detail="Goal not found")

    try:
        storage.delete_goal(goal_id)
    except DatabaseError:
        logger.exception(f"Failed to delete goal {goal_id}")
        raise HTTPException(status_code=500, detail="Failed to delete goal")

    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/{goal_id}/complete", response_model=CompletionResponse)
def complete_goal(goal_id: int, storage: JSONStorage = Depends(get_storage)):
    """Отметить цель выполненной"""
    try:
        goal = storage.complete_goal(goal_id)
    except DatabaseError:
        logger.exception(f"Failed to complete goal {goal_id}")
        raise HTTPException(status_code=500, detail="Failed to complete goal")

    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return CompletionResponse(message="Goal marked as completed", id=goal_id)
