from datetime import date
from decimal import Decimal

import pytest

from proclass.services.reminders.eligibility import DecisionKind, evaluate, is_base_eligible
from proclass.services.reminders.records import PaymentRecord, ReminderPolicy, StudentRecord

POLICY = ReminderPolicy(teacher_id=1, lead_days=3)


def student(**kw):
    data = dict(
        id=7, name="Ana", phone="5511988887777", status="active",
        monthly_fee=Decimal("150"), payment_day=10, charge_fee=True,
    )
    data.update(kw)
    return StudentRecord(**data)


def payment(status="paid", month="2024-05", student_id=7):
    return PaymentRecord(id=1, student_id=student_id, teacher_id=1,
                         amount=Decimal("150"), status=status, reference_month=month)


@pytest.mark.parametrize("override", [
    {"status": "inactive"},
    {"status": "trial"},
    {"charge_fee": False},
    {"monthly_fee": None},
    {"payment_day": None},
    {"phone": None},
    {"phone": ""},
])
@pytest.mark.parametrize("day", [1, 7, 10, 25])
def test_ineligible_student_is_always_skipped(override, day):
    st = student(**override)
    assert not is_base_eligible(st)
    decision = evaluate(st, [payment("pending")], date(2024, 5, day), POLICY)
    assert decision.kind is DecisionKind.INELIGIBLE
    assert not decision.should_send


@pytest.mark.parametrize("status", ["paid", "pending"])
@pytest.mark.parametrize("day", [7, 15])
def test_covering_payment_wins_over_send_window(status, day):
    decision = evaluate(student(), [payment(status)], date(2024, 5, day), POLICY)
    assert decision.kind is DecisionKind.ALREADY_SENT


@pytest.mark.parametrize("p", [
    payment("overdue"),
    payment("cancelled"),
    payment("paid", month="2024-04"),
    payment("paid", student_id=99),
])
def test_non_covering_payments_are_ignored(p):
    decision = evaluate(student(), [p], date(2024, 5, 7), POLICY)
    assert decision.kind is DecisionKind.SEND


@pytest.mark.parametrize("day", range(11, 32))
def test_every_day_after_due_day_is_overdue(day):
    decision = evaluate(student(), [], date(2024, 5, day), POLICY)
    assert decision.kind is DecisionKind.SEND
    assert decision.is_overdue


def test_target_day_is_exact():
    results = {
        day: evaluate(student(), [], date(2024, 5, day), POLICY)
        for day in range(1, 11)
    }
    assert results[7].kind is DecisionKind.SEND
    assert results[7].is_overdue is False
    for day, decision in results.items():
        if day != 7:
            assert decision.kind is DecisionKind.NOT_DUE, day


def test_due_day_itself_is_not_overdue():
    decision = evaluate(student(), [], date(2024, 5, 10), POLICY)
    assert decision.kind is DecisionKind.NOT_DUE


def test_target_day_before_month_start_never_matches():
    # vencimento dia 2 com 5 dias de antecedência => dia-alvo -3, sem volta para o mês anterior
    policy = ReminderPolicy(teacher_id=1, lead_days=5)
    st = student(payment_day=2)
    for day in range(1, 3):
        assert evaluate(st, [], date(2024, 5, day), policy).kind is DecisionKind.NOT_DUE
    assert evaluate(st, [], date(2024, 4, 28), policy).kind is DecisionKind.SEND
    assert evaluate(st, [], date(2024, 4, 28), policy).is_overdue


def test_zero_lead_days_sends_on_due_day():
    policy = ReminderPolicy(teacher_id=1, lead_days=0)
    decision = evaluate(student(), [], date(2024, 5, 10), policy)
    assert decision.kind is DecisionKind.SEND
    assert not decision.is_overdue
