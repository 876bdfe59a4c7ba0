from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from proclass.modules.whatsapp.schemas import BatchResultOut


class CronRunIn(BaseModel):
    # sem teacher_id: todos os professores com envio automático ligado
    teacher_id: Optional[int] = None


class CronRunOut(BaseModel):
    success: bool = True
    results: List[BatchResultOut]
    overdue_updated: int
    timestamp: datetime
