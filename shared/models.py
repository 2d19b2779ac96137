from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Any
from datetime import datetime

from utils.datetime_utils import to_naive_local

def _required_text(value: str, message: str) -> str:
    if not value:
        raise ValueError(message)
    return value

class RequestModel(BaseModel):
    """Обязательные поля по умолчанию пустые и проверяются валидаторами"""
    model_config = ConfigDict(validate_default=True)

# ===== ПРИВЫЧКИ =====

class HabitBase(RequestModel):
    name: str = ""
    description: str = ""
    category: str = ""
    frequency: str = ""

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _required_text(v, 'Habit name is required')

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return _required_text(v, 'Category is required')

    @field_validator('frequency')
    @classmethod
    def validate_frequency(cls, v):
        return _required_text(v, 'Frequency is required')

class HabitCreate(HabitBase):
    pass

class HabitUpdate(HabitBase):
    pass

# ===== ЦЕЛИ =====

class GoalBase(RequestModel):
    title: str = ""
    description: str = ""
    target_date: datetime

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return _required_text(v, 'Goal title is required')

    @field_validator('target_date')
    @classmethod
    def normalize_target_date(cls, v):
        return to_naive_local(v)

class GoalCreate(GoalBase):
    habit_ids: List[int] = Field(default_factory=list)

class GoalUpdate(GoalBase):
    # None - оставить текущий список
    habit_ids: Optional[List[int]] = None

# ===== ОТМЕТКИ =====

class TrackBase(RequestModel):
    habit_id: int = 0
    date: datetime
    completed: bool = False
    notes: str = ""

    @field_validator('habit_id')
    @classmethod
    def validate_habit_id(cls, v):
        if v <= 0:
            raise ValueError('Habit ID is required')
        return v

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v):
        return to_naive_local(v)

class TrackCreate(TrackBase):
    pass

class TrackUpdate(TrackBase):
    pass

# ===== ОТВЕТЫ =====

class CompletionResponse(BaseModel):
    message: str
    id: int

class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    storage: Dict[str, Any] = {}
