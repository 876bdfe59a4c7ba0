from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from proclass.core.config import settings
from proclass.core.dependencies import (
    get_db, get_current_user, get_reminder_scheduler, resolve_teacher_id,
)
from proclass.modules.users.models import User
from proclass.services.reminders.eligibility import evaluate, is_base_eligible
from proclass.services.reminders.errors import ChannelSendError, ConfigurationError
from proclass.services.reminders.ledger import SqlReminderLedger
from proclass.services.reminders.repositories import (
    SqlPaymentRepository, SqlStudentRepository, policy_record,
)
from proclass.services.reminders.scheduler import ReminderScheduler
from proclass.utils.br import local_today, normalize_reference_month, reference_month
from .models import WhatsAppConfig, DEFAULT_REMINDER_MESSAGE
from .schemas import (
    WhatsAppConfigIn, WhatsAppConfigOut, SendSingleIn, SendSingleOut, TeacherIn,
    BatchResultOut, AlertOut, ReminderLogOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CONFIG_ERRORS = {
    "not_found": (status.HTTP_404_NOT_FOUND, "Configuração do Twilio não encontrada"),
    "disabled": (status.HTTP_400_BAD_REQUEST, "Integração WhatsApp está desabilitada"),
    "missing_credentials": (status.HTTP_400_BAD_REQUEST, "Credenciais do Twilio incompletas"),
}


# ---------- Helpers ----------
async def _get_config(db: AsyncSession, teacher_id: int) -> WhatsAppConfig | None:
    q = await db.execute(select(WhatsAppConfig).where(WhatsAppConfig.teacher_id == teacher_id))
    return q.scalar_one_or_none()


def _http_from_config_error(e: ConfigurationError) -> HTTPException:
    code, detail = CONFIG_ERRORS.get(e.code, (status.HTTP_400_BAD_REQUEST, e.code))
    return HTTPException(status_code=code, detail=detail)


# ---------- Configuração ----------
@router.get("/config", response_model=Optional[WhatsAppConfigOut])
async def get_config(
    teacher_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    cfg = await _get_config(db, resolve_teacher_id(me, teacher_id))
    if not cfg:
        return None
    return WhatsAppConfigOut.model_validate(cfg)


@router.post("/config", response_model=dict)
async def upsert_config(
    payload: WhatsAppConfigIn,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    teacher_id = resolve_teacher_id(me, payload.teacher_id)
    values = {
        "account_sid": payload.account_sid.strip(),
        "auth_token": payload.auth_token.strip(),
        "phone_number": payload.phone_number.strip(),
        "reminder_days": 3 if payload.reminder_days is None else payload.reminder_days,
        "reminder_message": payload.reminder_message or DEFAULT_REMINDER_MESSAGE,
        "enabled": True if payload.enabled is None else payload.enabled,
        "auto_send_enabled": False if payload.auto_send_enabled is None else payload.auto_send_enabled,
        "auto_send_time": payload.auto_send_time or "09:00",
        "timezone": payload.timezone or settings.DEFAULT_TIMEZONE,
    }

    cfg = await _get_config(db, teacher_id)
    if cfg:
        for k, v in values.items():
            setattr(cfg, k, v)
    else:
        cfg = WhatsAppConfig(teacher_id=teacher_id, **values)
        db.add(cfg)
    await db.commit()
    await db.refresh(cfg)
    logger.info("Configuração WhatsApp salva para professor %s", teacher_id)
    return {"success": True, "config": WhatsAppConfigOut.model_validate(cfg).model_dump()}


@router.delete("/config", status_code=status.HTTP_204_NO_CONTENT)
async def delete_config(
    teacher_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    await db.execute(delete(WhatsAppConfig).where(WhatsAppConfig.teacher_id == resolve_teacher_id(me, teacher_id)))
    await db.commit()
    return Response(status_code=204)


# ---------- Envio ----------
@router.post("/send", response_model=SendSingleOut)
async def send_single(
    payload: SendSingleIn,
    me: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    teacher_id = resolve_teacher_id(me, payload.teacher_id)
    try:
        result = await scheduler.send_single(
            teacher_id,
            phone=payload.phone,
            student_name=payload.student_name,
            amount=payload.amount,
            due_day=payload.due_day,
            custom_message=payload.custom_message,
        )
    except ConfigurationError as e:
        raise _http_from_config_error(e)
    except ChannelSendError as e:
        logger.warning("Envio individual falhou (professor %s): %s", teacher_id, e.data)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e.data or "Erro ao enviar mensagem"))
    return SendSingleOut(**vars(result))


@router.post("/send-pending", response_model=BatchResultOut)
async def send_pending(
    payload: TeacherIn,
    me: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    try:
        result = await scheduler.send_to_pending(resolve_teacher_id(me, payload.teacher_id))
    except ConfigurationError as e:
        raise _http_from_config_error(e)
    return BatchResultOut.model_validate(result)


@router.post("/run", response_model=BatchResultOut)
async def run_now(
    payload: TeacherIn,
    me: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    result = await scheduler.run_for_teacher(resolve_teacher_id(me, payload.teacher_id))
    return BatchResultOut.model_validate(result)


# ---------- Painel ----------
@router.get("/alerts", response_model=List[AlertOut])
async def list_alerts(
    teacher_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    """Alunos elegíveis com a decisão de hoje (mesma regra do envio automático)."""
    tid = resolve_teacher_id(me, teacher_id)
    cfg = await _get_config(db, tid)
    if not cfg:
        return []
    policy = policy_record(cfg)
    today: date = local_today(policy.timezone)
    month = reference_month(today)

    students = await SqlStudentRepository(db).list_for_teacher(tid)
    payments = await SqlPaymentRepository(db).list_for_teacher(tid)
    ledger = SqlReminderLedger(db)

    alerts = []
    for st in students:
        if not is_base_eligible(st):
            continue
        decision = evaluate(st, payments, today, policy)
        alerts.append(AlertOut(
            student_id=st.id,
            student_name=st.name,
            phone=st.phone,
            amount=float(st.monthly_fee) if st.monthly_fee is not None else None,
            due_day=st.payment_day,
            decision=decision.kind.value,
            is_overdue=decision.is_overdue,
            already_reminded=await ledger.has_been_sent(tid, st.id, month),
        ))
    return alerts


@router.get("/reminders", response_model=List[ReminderLogOut])
async def list_reminders(
    teacher_id: Optional[int] = Query(None),
    reference_month_q: Optional[str] = Query(None, alias="reference_month"),
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    month = None
    if reference_month_q:
        try:
            month = normalize_reference_month(reference_month_q)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    entries = await SqlReminderLedger(db).list_for_teacher(resolve_teacher_id(me, teacher_id), month)
    return [ReminderLogOut.model_validate(e) for e in entries]
