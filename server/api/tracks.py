from fastapi import APIRouter, HTTPException, Depends, Response, status
from typing import Dict, Any
import logging

from core.database import JSONStorage, DatabaseError
from core.models import HabitTrack
from shared.models import TrackCreate, TrackUpdate
from ..dependencies import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tracks", tags=["tracks"])

def _ensure_habit_exists(storage: JSONStorage, habit_id: int) -> None:
    # Ссылка проверяется только здесь, при записи отметки
    if storage.get_habit_by_id(habit_id) is None:
        raise HTTPException(status_code=400, detail="Habit not found")

@router.get("", response_model=Dict[str, Any])
def get_all_tracks(storage: JSONStorage = Depends(get_storage)):
    """Получить все отметки"""
    tracks = storage.get_all_tracks()
    return {
        "tracks": [track.to_dict() for track in tracks],
        "count": len(tracks)
    }

@router.get("/{track_id}", response_model=Dict[str, Any])
def get_track(track_id: int, storage: JSONStorage = Depends(get_storage)):
    track = storage.get_track_by_id(track_id)
    if track is None:
        raise HTTPException(status_code=404, detail="Track not found")
    return track.to_dict()

@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
def create_track(payload: TrackCreate, storage: JSONStorage = Depends(get_storage)):
    """Создать отметку для существующей привычки"""
    _ensure_habit_exists(storage, payload.habit_id)

    track = HabitTrack.create(
        habit_id=payload.habit_id,
        date=payload.date,
        completed=payload.completed,
        notes=payload.notes
    )

    try:
        created = storage.create_track(track)
    except DatabaseError:
        logger.exception("Failed to create track")
        raise HTTPException(status_code=500, detail="Failed to create track")

    return created.to_dict()

@router.put("/{track_id}", response_model=Dict[str, Any])
def update_track(track_id: int, payload: TrackUpdate, storage: JSONStorage = Depends(get_storage)):
    _ensure_habit_exists(storage, payload.habit_id)

    if storage.get_track_by_id(track_id) is None:
        raise HTTPException(status_code=404, detail="Track not found")

    track = HabitTrack(
        id=track_id,
        habit_id=payload.habit_id,
        date=payload.date,
        completed=payload.completed,
        notes=payload.notes
    )

    try:
        updated = storage.update_track(track_id, track)
    except DatabaseError:
        logger.exception(f"Failed to update track {track_id}")
        raise HTTPException(status_code=500, detail="Failed to update track")

    if updated is None:
        raise HTTPException(status_code=404, detail="Track not found")
    return updated.to_dict()

@router.delete("/{track_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_track(track_id: int, storage: JSONStorage = Depends(get_storage)):
    if storage.get_track_by_id(track_id) is None:
        raise HTTPException(status_code=404, detail="Track not found")

    try:
        storage.delete_track(track_id)
    except DatabaseError:
        logger.exception(f"Failed to delete track {track_id}")
        raise HTTPException(status_code=500, detail="Failed to delete track")

    return Response(status_code=status.HTTP_204_NO_CONTENT)
