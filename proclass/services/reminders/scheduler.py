# proclass/services/reminders/scheduler.py
"""
Execução em lote dos lembretes de pagamento por WhatsApp.

Três portas de entrada, todas passando pelo mesmo avaliador (`eligibility.evaluate`):

- `run_for_teacher`: job agendado/manual; respeita o ledger (1 lembrete por
  aluno por competência) e grava cada tentativa, enviada ou não.
- `send_to_pending`: botão "enviar para todos pendentes"; não consulta nem grava
  o ledger, então pode repetir um lembrete já enviado pelo job no mesmo dia.
- `send_single`: envio direto para um número, sem avaliador e sem ledger.

Tudo sequencial: um aluno por vez, aguardando cada envio.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from proclass.utils.br import local_today, normalize_whatsapp_phone, reference_month
from proclass.modules.whatsapp.models import DELIVERY_SENT, DELIVERY_FAILED
from .channel import ChannelFactory, MessagingChannel
from .eligibility import DecisionKind, evaluate, is_base_eligible
from .errors import ChannelSendError, ConfigurationError, ConflictError
from .ledger import ReminderLedger
from .records import (
    BatchResult, ReminderLogEntry, ReminderPolicy, SendResult, StudentOutcome, StudentRecord,
)
from .renderer import fill_placeholders, render_message
from .repositories import PaymentRepository, PolicyRepository, StudentRepository

logger = logging.getLogger(__name__)


class ReminderScheduler:
    def __init__(
        self,
        students: StudentRepository,
        payments: PaymentRepository,
        policies: PolicyRepository,
        ledger: ReminderLedger,
        channel_factory: ChannelFactory,
    ):
        self.students = students
        self.payments = payments
        self.policies = policies
        self.ledger = ledger
        self.channel_factory = channel_factory

    # ---------- helpers ----------
    async def _load_policy(self, teacher_id: int, require_auto_send: bool) -> ReminderPolicy:
        policy = await self.policies.get(teacher_id)
        if policy is None:
            raise ConfigurationError("not_found", {"teacher_id": teacher_id})
        if not policy.enabled:
            raise ConfigurationError("disabled", {"teacher_id": teacher_id})
        if require_auto_send and not policy.auto_send_enabled:
            raise ConfigurationError("auto_send_disabled", {"teacher_id": teacher_id})
        return policy

    async def _deliver(self, channel: MessagingChannel, phone: str, body: str) -> SendResult:
        """Envia e converte exceção em SendResult(success=False)."""
        try:
            return await channel.send(normalize_whatsapp_phone(phone), body)
        except ChannelSendError as e:
            return SendResult(success=False, error=str(e.data or e.code))
        except Exception as e:  # qualquer falha do canal é isolada por aluno
            logger.exception("Erro inesperado no canal de mensagens")
            return SendResult(success=False, error=str(e) or e.__class__.__name__)

    # ---------- job (com ledger) ----------
    async def run_for_teacher(self, teacher_id: int, today: Optional[date] = None) -> BatchResult:
        result = BatchResult(teacher_id=teacher_id)
        try:
            policy = await self._load_policy(teacher_id, require_auto_send=True)
            channel = self.channel_factory(policy)
        except ConfigurationError as e:
            logger.info("Lembretes: professor %s sem execução (%s)", teacher_id, e.code)
            result.message = f"Envio automático não executado: {e.code}"
            return result

        today = today or local_today(policy.timezone)
        month = reference_month(today)
        result.reference_month = month

        students = await self.students.list_for_teacher(teacher_id)
        payments = await self.payments.list_for_teacher(teacher_id)
        eligible = [s for s in students if is_base_eligible(s)]
        logger.info(
            "Lembretes: professor %s, competência %s, %d/%d alunos elegíveis",
            teacher_id, month, len(eligible), len(students),
        )

        for student in eligible:
            if await self.ledger.has_been_sent(teacher_id, student.id, month):
                result.add(StudentOutcome(student.id, student.name, "skipped", reason=DecisionKind.ALREADY_SENT.value))
                continue

            decision = evaluate(student, payments, today, policy)
            if not decision.should_send:
                result.add(StudentOutcome(student.id, student.name, "skipped", reason=decision.kind.value))
                continue

            body = render_message(
                policy.message_template, student, student.monthly_fee, student.payment_day, decision.is_overdue
            )
            sent = await self._deliver(channel, student.phone, body)
            outcome = await self._record(teacher_id, student, month, decision.is_overdue, sent)
            result.add(outcome)

        logger.info(
            "Lembretes: professor %s concluído (enviados=%d, falhas=%d, ignorados=%d)",
            teacher_id, result.sent, result.failed, result.skipped,
        )
        return result

    async def _record(
        self, teacher_id: int, student: StudentRecord, month: str, is_overdue: bool, sent: SendResult
    ) -> StudentOutcome:
        entry = ReminderLogEntry(
            teacher_id=teacher_id,
            student_id=student.id,
            reference_month=month,
            delivery_status=DELIVERY_SENT if sent.success else DELIVERY_FAILED,
            channel_message_id=sent.message_id,
            error_detail=None if sent.success else sent.error,
            amount_at_send=Decimal(str(student.monthly_fee)) if student.monthly_fee is not None else None,
            due_day_at_send=student.payment_day,
        )
        outcome = StudentOutcome(
            student.id, student.name,
            "sent" if sent.success else "failed",
            is_overdue=is_overdue,
            message_id=sent.message_id,
            error=sent.error,
        )
        if sent.success:
            logger.info("Lembrete enviado para aluno %s (%s)", student.id, sent.message_id)
        else:
            logger.warning("Falha no lembrete para aluno %s: %s", student.id, sent.error)

        try:
            await self.ledger.record(entry)
        except ConflictError:
            # outra execução gravou no meio do caminho; a mensagem já saiu
            logger.warning("Lembrete duplicado para aluno %s em %s (execução concorrente)", student.id, month)
            outcome.reason = "concurrent_run"
        return outcome

    async def run_all(self, today: Optional[date] = None) -> list[BatchResult]:
        results = []
        for teacher_id in await self.policies.teachers_with_auto_send():
            results.append(await self.run_for_teacher(teacher_id, today))
        return results

    # ---------- botão "enviar para todos pendentes" (sem ledger) ----------
    async def send_to_pending(self, teacher_id: int, today: Optional[date] = None) -> BatchResult:
        policy = await self._load_policy(teacher_id, require_auto_send=False)
        channel = self.channel_factory(policy)

        today = today or local_today(policy.timezone)
        result = BatchResult(teacher_id=teacher_id, reference_month=reference_month(today))

        students = await self.students.list_for_teacher(teacher_id)
        payments = await self.payments.list_for_teacher(teacher_id)

        for student in students:
            decision = evaluate(student, payments, today, policy)
            # só importa não ter pagamento na competência; dia-alvo não conta aqui
            if decision.kind not in (DecisionKind.SEND, DecisionKind.NOT_DUE):
                continue

            body = render_message(
                policy.message_template, student, student.monthly_fee, student.payment_day, decision.is_overdue
            )
            sent = await self._deliver(channel, student.phone, body)
            result.add(StudentOutcome(
                student.id, student.name,
                "sent" if sent.success else "failed",
                is_overdue=decision.is_overdue,
                message_id=sent.message_id,
                error=sent.error,
            ))

        logger.info(
            "Envio manual: professor %s (enviados=%d, falhas=%d)", teacher_id, result.sent, result.failed
        )
        return result

    # ---------- envio individual (sem avaliador, sem ledger) ----------
    async def send_single(
        self,
        teacher_id: int,
        phone: str,
        student_name: Optional[str] = None,
        amount=None,
        due_day: Optional[int] = None,
        custom_message: Optional[str] = None,
    ) -> SendResult:
        policy = await self._load_policy(teacher_id, require_auto_send=False)
        channel = self.channel_factory(policy)

        template = custom_message or policy.message_template
        body = fill_placeholders(template, student_name, amount, due_day)
        # aqui o erro do canal sobe para quem chamou
        return await channel.send(normalize_whatsapp_phone(phone), body)
