#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Tracker API - JSON Storage
Хранилище привычек, целей и отметок в одном JSON файле

Все состояние живет в памяти и после каждого изменения целиком
перезаписывается на диск. Чтения идут под общей блокировкой,
изменения вместе с записью файла - под исключительной.

Версия: 1.0.0
Дата: 2026-10-19
"""

import os
import json
import copy
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union, Any, Callable, TypeVar
from dataclasses import dataclass
import logging

from core.models import Habit, Goal, HabitTrack, ValidationError
from core.statistics import Statistics, calculate_statistics
from utils.datetime_utils import now_local

logger = logging.getLogger(__name__)

Entity = TypeVar("Entity", Habit, Goal, HabitTrack)

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Базовое исключение для ошибок базы данных"""
    pass

class DatabaseLoadError(DatabaseError):
    """Не удалось прочитать файл базы данных"""
    pass

class DatabaseCorruptionError(DatabaseError):
    """Файл базы данных не является ожидаемым JSON документом"""
    pass

class DatabaseSaveError(DatabaseError):
    """Не удалось записать файл базы данных"""
    pass

# ===== HELPER CLASSES =====

class ReadWriteLock:
    """
    Блокировка читатель/писатель

    Читатели не мешают друг другу, писатель работает один. Ожидающий
    писатель не пускает новых читателей, чтобы поток чтений его не вытеснил.
    Блокировка не реентерабельна.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

@dataclass
class StorageStats:
    """Счетчики операций с файлом"""
    load_count: int = 0
    save_count: int = 0
    error_count: int = 0
    last_save: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'load_count': self.load_count,
            'save_count': self.save_count,
            'error_count': self.error_count,
            'last_save': self.last_save
        }

# ===== STORAGE =====

class JSONStorage:
    """Хранилище привычек, целей и отметок в JSON файле"""

    def __init__(self, data_file: Union[str, Path]):
        self.data_file = Path(data_file)
        self._lock = ReadWriteLock()

        self.habits: Dict[int, Habit] = {}
        self.goals: Dict[int, Goal] = {}
        self.habit_tracks: Dict[int, HabitTrack] = {}
        self.next_habit_id = 1
        self.next_goal_id = 1
        self.next_track_id = 1

        self.stats = StorageStats()
        self.start_time = time.time()

        self._load()

    # ===== ЗАГРУЗКА И СОХРАНЕНИЕ =====

    def _load(self) -> None:
        """Загрузка состояния; отсутствие файла - пустая база"""
        with self._lock.write_locked():
            try:
                raw = self.data_file.read_text(encoding='utf-8')
            except FileNotFoundError:
                logger.info(f"Database file {self.data_file} does not exist, starting with empty database")
                try:
                    self.data_file.parent.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise DatabaseLoadError(f"Failed to create {self.data_file.parent}: {e}") from e
                self.stats.load_count += 1
                return
            except OSError as e:
                raise DatabaseLoadError(f"Failed to read {self.data_file}: {e}") from e

            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                raise DatabaseCorruptionError(f"Database file {self.data_file} is not valid JSON: {e}") from e

            if not isinstance(data, dict):
                raise DatabaseCorruptionError(f"Database file {self.data_file} must contain a JSON object")

            try:
                self.habits = self._load_collection(data, "habits", Habit.from_dict)
                self.goals = self._load_collection(data, "goals", Goal.from_dict)
                self.habit_tracks = self._load_collection(data, "habit_tracks", HabitTrack.from_dict)
                self.next_habit_id = self._load_counter(data, "next_habit_id")
                self.next_goal_id = self._load_counter(data, "next_goal_id")
                self.next_track_id = self._load_counter(data, "next_track_id")
            except (ValidationError, TypeError, ValueError, AttributeError) as e:
                raise DatabaseCorruptionError(f"Database file {self.data_file} has unexpected shape: {e}") from e

            self.stats.load_count += 1
            logger.info(
                f"Loaded {len(self.habits)} habits, {len(self.goals)} goals, "
                f"{len(self.habit_tracks)} tracks from {self.data_file}"
            )

    @staticmethod
    def _load_collection(data: Dict[str, Any], key: str,
                         factory: Callable[[Dict[str, Any]], Entity]) -> Dict[int, Entity]:
        raw = data.get(key) or {}
        if not isinstance(raw, dict):
            raise ValidationError(f"'{key}' must be an object")
        return {int(entity_id): factory(item) for entity_id, item in raw.items()}

    @staticmethod
    def _load_counter(data: Dict[str, Any], key: str) -> int:
        value = data.get(key, 1)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"'{key}' must be an integer")
        return value

    def _to_document(self) -> Dict[str, Any]:
        return {
            "habits": {str(i): h.to_dict() for i, h in self.habits.items()},
            "goals": {str(i): g.to_dict() for i, g in self.goals.items()},
            "habit_tracks": {str(i): t.to_dict() for i, t in self.habit_tracks.items()},
            "next_habit_id": self.next_habit_id,
            "next_goal_id": self.next_goal_id,
            "next_track_id": self.next_track_id
        }

    def _save(self) -> None:
        """Полная перезапись файла; вызывается под исключительной блокировкой"""
        temp_file = self.data_file.with_name(self.data_file.name + '.tmp')

        try:
            payload = json.dumps(self._to_document(), ensure_ascii=False, indent=2)
            # Атомарное сохранение через временный файл
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(temp_file, self.data_file)
        except (OSError, TypeError, ValueError) as e:
            self.stats.error_count += 1
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    logger.warning(f"Failed to remove temporary file {temp_file}")
            raise DatabaseSaveError(f"Failed to save {self.data_file}: {e}") from e

        self.stats.save_count += 1
        self.stats.last_save = datetime.now().isoformat()
        logger.debug(f"Database saved to {self.data_file}")

    # ===== ОБЩИЕ ОПЕРАЦИИ =====

    def _get_all(self, collection: Dict[int, Entity]) -> List[Entity]:
        with self._lock.read_locked():
            return [copy.deepcopy(entity) for entity in collection.values()]

    def _get_by_id(self, collection: Dict[int, Entity], entity_id: int) -> Optional[Entity]:
        with self._lock.read_locked():
            entity = collection.get(entity_id)
            return copy.deepcopy(entity) if entity is not None else None

    def _insert(self, collection: Dict[int, Entity], counter: str, entity: Entity) -> Entity:
        """Назначить следующий id и вставить; вызывается под исключительной блокировкой"""
        entity = copy.deepcopy(entity)
        # Время могло быть изменено после создания объекта
        entity.normalize()
        entity.id = getattr(self, counter)
        setattr(self, counter, entity.id + 1)
        collection[entity.id] = entity
        return entity

    def _create(self, collection: Dict[int, Entity], counter: str, entity: Entity) -> Entity:
        with self._lock.write_locked():
            stored = self._insert(collection, counter, entity)
            self._save()
            return copy.deepcopy(stored)

    def _update(self, collection: Dict[int, Entity], entity_id: int, entity: Entity) -> Optional[Entity]:
        with self._lock.write_locked():
            if entity_id not in collection:
                return None

            stored = copy.deepcopy(entity)
            stored.normalize()
            stored.id = entity_id
            collection[entity_id] = stored
            self._save()
            return copy.deepcopy(stored)

    def _delete(self, collection: Dict[int, Entity], entity_id: int) -> bool:
        with self._lock.write_locked():
            if entity_id not in collection:
                return False

            # Ссылки из других коллекций не трогаем
            del collection[entity_id]
            self._save()
            return True

    # ===== ПРИВЫЧКИ =====

    def get_all_habits(self) -> List[Habit]:
        return self._get_all(self.habits)

    def get_habit_by_id(self, habit_id: int) -> Optional[Habit]:
        return self._get_by_id(self.habits, habit_id)

    def create_habit(self, habit: Habit) -> Habit:
        return self._create(self.habits, "next_habit_id", habit)

    def update_habit(self, habit_id: int, habit: Habit) -> Optional[Habit]:
        return self._update(self.habits, habit_id, habit)

    def delete_habit(self, habit_id: int) -> bool:
        return self._delete(self.habits, habit_id)

    def complete_habit(self, habit_id: int) -> Optional[Habit]:
        """
        Отметить привычку выполненной

        Повторный вызов ничего не меняет. Первый вызов добавляет ровно одну
        отметку на текущий момент и сохраняет файл один раз.
        """
        with self._lock.write_locked():
            habit = self.habits.get(habit_id)
            if habit is None:
                return None
            if habit.completed:
                return copy.deepcopy(habit)

            habit.completed = True
            self._insert(self.habit_tracks, "next_track_id", HabitTrack.create_for_completion(habit_id))
            self._save()
            return copy.deepcopy(habit)

    # ===== ЦЕЛИ =====

    def get_all_goals(self) -> List[Goal]:
        return self._get_all(self.goals)

    def get_goal_by_id(self, goal_id: int) -> Optional[Goal]:
        return self._get_by_id(self.goals, goal_id)

    def create_goal(self, goal: Goal) -> Goal:
        return self._create(self.goals, "next_goal_id", goal)

    def update_goal(self, goal_id: int, goal: Goal) -> Optional[Goal]:
        return self._update(self.goals, goal_id, goal)

    def delete_goal(self, goal_id: int) -> bool:
        return self._delete(self.goals, goal_id)

    def complete_goal(self, goal_id: int) -> Optional[Goal]:
        """Отметить цель выполненной и проставить completed_at; повторный вызов - no-op"""
        with self._lock.write_locked():
            goal = self.goals.get(goal_id)
            if goal is None:
                return None
            if goal.completed:
                return copy.deepcopy(goal)

            goal.completed = True
            goal.completed_at = now_local()
            self._save()
            return copy.deepcopy(goal)

    # ===== ОТМЕТКИ =====

    def get_all_tracks(self) -> List[HabitTrack]:
        return self._get_all(self.habit_tracks)

    def get_track_by_id(self, track_id: int) -> Optional[HabitTrack]:
        return self._get_by_id(self.habit_tracks, track_id)

    def create_track(self, track: HabitTrack) -> HabitTrack:
        return self._create(self.habit_tracks, "next_track_id", track)

    def update_track(self, track_id: int, track: HabitTrack) -> Optional[HabitTrack]:
        return self._update(self.habit_tracks, track_id, track)

    def delete_track(self, track_id: int) -> bool:
        return self._delete(self.habit_tracks, track_id)

    # ===== СТАТИСТИКА =====

    def get_statistics(self) -> Statistics:
        with self._lock.read_locked():
            return calculate_statistics(
                self.habits.values(),
                self.goals.values(),
                self.habit_tracks.values(),
                now_local()
            )

    def get_health_status(self) -> Dict[str, Any]:
        """Сводка для health check"""
        with self._lock.read_locked():
            return {
                'data_file': str(self.data_file),
                'habits': len(self.habits),
                'goals': len(self.goals),
                'tracks': len(self.habit_tracks),
                'uptime_seconds': int(time.time() - self.start_time),
                **self.stats.to_dict()
            }
