from fastapi import APIRouter, HTTPException, Depends, Response, status
from typing import Dict, Any
import logging

from core.database import JSONStorage, DatabaseError
from core.models import Habit
from shared.models import HabitCreate, HabitUpdate, CompletionResponse
from ..dependencies import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/habits", tags=["habits"])

@router.get("", response_model=Dict[str, Any])
def get_all_habits(storage: JSONStorage = Depends(get_storage)):
    """Получить все привычки"""
    try:
        habits = storage.get_all_habits()
    except DatabaseError:
        logger.exception("Failed to get habits")
        raise HTTPException(status_code=500, detail="Failed to get habits")

    return {
        "habits": [habit.to_dict() for habit in habits],
        "count": len(habits)
    }

@router.get("/{habit_id}", response_model=Dict[str, Any])
def get_habit(habit_id: int, storage: JSONStorage = Depends(get_storage)):
    """Получить привычку по ID"""
    habit = storage.get_habit_by_id(habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return habit.to_dict()

@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
def create_habit(payload: HabitCreate, storage: JSONStorage = Depends(get_storage)):
    """Создать привычку"""
    habit = Habit.create(
        name=payload.name,
        description=payload.description,
        category=payload.category,
        frequency=payload.frequency
    )

    try:
        created = storage.create_habit(habit)
    except DatabaseError:
        logger.exception("Failed to create habit")
        raise HTTPException(status_code=500, detail="Failed to create habit")

    logger.info(f"Created habit {created.id}: {created.name}")
    return created.to_dict()

@router.put("/{habit_id}", response_model=Dict[str, Any])
def update_habit(habit_id: int, payload: HabitUpdate, storage: JSONStorage = Depends(get_storage)):
    """Обновить привычку; created_at и completed остаются прежними"""
    existing = storage.get_habit_by_id(habit_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Habit not found")

    habit = Habit(
        id=habit_id,
        name=payload.name,
        description=payload.description,
        category=payload.category,
        frequency=payload.frequency,
        created_at=existing.created_at,
        completed=existing.completed
    )

    try:
        updated = storage.update_habit(habit_id, habit)
    except DatabaseError:
        logger.exception(f"Failed to update habit {habit_id}")
        raise HTTPException(status_code=500, detail="Failed to update habit")

    if updated is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return updated.to_dict()

@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_habit(habit_id: int, storage: JSONStorage = Depends(get_storage)):
    """Удалить привычку; ее отметки остаются"""
    if storage.get_habit_by_id(habit_id) is None:
        raise HTTPException(status_code=404, detail="Habit not found")

    try:
        storage.delete_habit(habit_id)
    except DatabaseError:
        logger.exception(f"Failed to delete habit {habit_id}")
        raise HTTPException(status_code=500, detail="Failed to delete habit")

    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/{habit_id}/complete", response_model=CompletionResponse)
def complete_habit(habit_id: int, storage: JSONStorage = Depends(get_storage)):
    """Отметить привычку выполненной"""
    try:
        habit = storage.complete_habit(habit_id)
    except DatabaseError:
        logger.exception(f"Failed to complete habit {habit_id}")
        raise HTTPException(status_code=500, detail="Failed to complete habit")

    if habit is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return CompletionResponse(message="Habit marked as completed", id=habit_id)
