from fastapi import APIRouter, Depends
from typing import Dict, Any

from core.database import JSONStorage
from ..dependencies import get_storage

router = APIRouter(prefix="/api/v1", tags=["statistics"])

@router.get("/statistics", response_model=Dict[str, Any])
def get_statistics(storage: JSONStorage = Depends(get_storage)):
    """
    Сводная статистика: выполнение привычек и целей, просроченные цели,
    выполнения за сегодня и разбивка привычек по категориям
    """
    return storage.get_statistics().to_dict()
