"""
Habit Tracker API - Statistics
Сводная статистика по привычкам, целям и отметкам. Считается при каждом
запросе и нигде не хранится.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Iterable

from core.models import Habit, Goal, HabitTrack
from utils.datetime_utils import is_same_day

def percentage(part: int, total: int) -> float:
    """Доля в процентах; 0 при пустом множестве"""
    if total <= 0:
        return 0.0
    return part / total * 100

@dataclass
class CategoryStats:
    """Статистика привычек одной категории"""
    total: int = 0
    completed: int = 0
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "percentage": self.percentage
        }

@dataclass
class Statistics:
    """Снимок статистики"""
    total_habits: int = 0
    completed_habits: int = 0
    habit_completion_rate: float = 0.0
    total_goals: int = 0
    completed_goals: int = 0
    goal_completion_rate: float = 0.0
    overdue_goals: int = 0
    today_completed: int = 0
    total_items: int = 0
    completed_items: int = 0
    overall_progress: float = 0.0
    categories: Dict[str, CategoryStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_habits": self.total_habits,
            "completed_habits": self.completed_habits,
            "habit_completion_rate": self.habit_completion_rate,
            "total_goals": self.total_goals,
            "completed_goals": self.completed_goals,
            "goal_completion_rate": self.goal_completion_rate,
            "overdue_goals": self.overdue_goals,
            "today_completed": self.today_completed,
            "total_items": self.total_items,
            "completed_items": self.completed_items,
            "overall_progress": self.overall_progress,
            "categories": {
                name: stats.to_dict() for name, stats in self.categories.items()
            }
        }

def calculate_statistics(habits: Iterable[Habit], goals: Iterable[Goal],
                         tracks: Iterable[HabitTrack], now: datetime) -> Statistics:
    """Один проход по каждой коллекции"""
    stats = Statistics()

    # Привычки и категории
    for habit in habits:
        stats.total_habits += 1
        category = stats.categories.setdefault(habit.category, CategoryStats())
        category.total += 1
        if habit.completed:
            stats.completed_habits += 1
            category.completed += 1

    for category in stats.categories.values():
        category.percentage = percentage(category.completed, category.total)

    # Цели
    for goal in goals:
        stats.total_goals += 1
        if goal.completed:
            stats.completed_goals += 1
        elif goal.is_overdue(now):
            stats.overdue_goals += 1

    # Сегодняшние выполнения
    today = now.date()
    stats.today_completed = sum(
        1 for track in tracks
        if track.completed and is_same_day(track.date, today)
    )

    stats.habit_completion_rate = percentage(stats.completed_habits, stats.total_habits)
    stats.goal_completion_rate = percentage(stats.completed_goals, stats.total_goals)

    stats.total_items = stats.total_habits + stats.total_goals
    stats.completed_items = stats.completed_habits + stats.completed_goals
    stats.overall_progress = percentage(stats.completed_items, stats.total_items)

    return stats
