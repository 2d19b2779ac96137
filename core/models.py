#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Tracker API - Core Data Models
Привычки, цели и ежедневные отметки привычек

Версия: 1.0.0
Дата: 2026-10-19
"""

from datetime import datetime
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
import logging

from utils.datetime_utils import now_local, parse_datetime, format_datetime, to_naive_local

logger = logging.getLogger(__name__)

# Заметка для отметки, созданной при выполнении привычки
COMPLETION_NOTE = "Marked as completed via API"

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def _require(data: Dict[str, Any], key: str, model: str) -> Any:
    if key not in data:
        raise ValidationError(f"{model}: missing field '{key}'")
    return data[key]

def _require_datetime(data: Dict[str, Any], key: str, model: str) -> datetime:
    try:
        value = parse_datetime(_require(data, key, model))
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"{model}: invalid {key}: {e}")
    if value is None:
        raise ValidationError(f"{model}: empty {key}")
    return value

def _require_int(data: Dict[str, Any], key: str, model: str) -> int:
    value = _require(data, key, model)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{model}: {key} must be an integer")
    return value

# ===== CORE MODELS =====

@dataclass
class Habit:
    """Привычка - регулярное действие пользователя"""
    id: int
    name: str
    description: str = ""
    category: str = ""
    frequency: str = ""
    created_at: datetime = field(default_factory=now_local)
    completed: bool = False

    def __post_init__(self):
        self.normalize()

    def normalize(self) -> None:
        """Время без tzinfo в часовом поясе приложения"""
        self.created_at = to_naive_local(self.created_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "frequency": self.frequency,
            "created_at": format_datetime(self.created_at),
            "completed": self.completed
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        return cls(
            id=_require_int(data, "id", "Habit"),
            name=_require(data, "name", "Habit"),
            description=data.get("description", ""),
            category=data.get("category", ""),
            frequency=data.get("frequency", ""),
            created_at=_require_datetime(data, "created_at", "Habit"),
            completed=bool(data.get("completed", False))
        )

    @classmethod
    def create(cls, name: str, category: str, frequency: str,
               description: str = "") -> "Habit":
        """Новая привычка; id назначит хранилище"""
        return cls(
            id=0,
            name=name,
            description=description,
            category=category,
            frequency=frequency
        )

@dataclass
class Goal:
    """Цель со сроком, опционально связанная с привычками"""
    id: int
    title: str
    target_date: datetime
    description: str = ""
    created_at: datetime = field(default_factory=now_local)
    completed: bool = False
    completed_at: Optional[datetime] = None
    # Ссылки на привычки не проверяются
    habit_ids: List[int] = field(default_factory=list)

    def __post_init__(self):
        self.normalize()

    def normalize(self) -> None:
        self.target_date = to_naive_local(self.target_date)
        self.created_at = to_naive_local(self.created_at)
        if self.completed_at is not None:
            self.completed_at = to_naive_local(self.completed_at)

    def is_overdue(self, now: datetime) -> bool:
        return not self.completed and self.target_date < now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "target_date": format_datetime(self.target_date),
            "created_at": format_datetime(self.created_at),
            "completed": self.completed,
            "completed_at": format_datetime(self.completed_at),
            "habit_ids": list(self.habit_ids)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        try:
            completed_at = parse_datetime(data.get("completed_at"), zero_as_none=True)
        except (TypeError, ValueError, AttributeError) as e:
            raise ValidationError(f"Goal: invalid completed_at: {e}")

        habit_ids = data.get("habit_ids") or []
        if not isinstance(habit_ids, list):
            raise ValidationError("Goal: habit_ids must be a list")

        return cls(
            id=_require_int(data, "id", "Goal"),
            title=_require(data, "title", "Goal"),
            description=data.get("description", ""),
            target_date=_require_datetime(data, "target_date", "Goal"),
            created_at=_require_datetime(data, "created_at", "Goal"),
            completed=bool(data.get("completed", False)),
            completed_at=completed_at,
            habit_ids=[int(habit_id) for habit_id in habit_ids]
        )

    @classmethod
    def create(cls, title: str, target_date: datetime, description: str = "",
               habit_ids: Optional[List[int]] = None) -> "Goal":
        """Новая цель; id назначит хранилище"""
        return cls(
            id=0,
            title=title,
            target_date=target_date,
            description=description,
            habit_ids=list(habit_ids or [])
        )

@dataclass
class HabitTrack:
    """Отметка о выполнении привычки в конкретный день"""
    id: int
    habit_id: int
    date: datetime
    completed: bool = False
    notes: str = ""

    def __post_init__(self):
        self.normalize()

    def normalize(self) -> None:
        self.date = to_naive_local(self.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "date": format_datetime(self.date),
            "completed": self.completed,
            "notes": self.notes
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HabitTrack":
        return cls(
            id=_require_int(data, "id", "HabitTrack"),
            habit_id=_require_int(data, "habit_id", "HabitTrack"),
            date=_require_datetime(data, "date", "HabitTrack"),
            completed=bool(data.get("completed", False)),
            notes=data.get("notes", "")
        )

    @classmethod
    def create(cls, habit_id: int, date: datetime, completed: bool = False,
               notes: str = "") -> "HabitTrack":
        return cls(id=0, habit_id=habit_id, date=date, completed=completed, notes=notes)

    @classmethod
    def create_for_completion(cls, habit_id: int) -> "HabitTrack":
        """Отметка, которую хранилище добавляет при выполнении привычки"""
        return cls.create(habit_id, now_local(), completed=True, notes=COMPLETION_NOTE)
