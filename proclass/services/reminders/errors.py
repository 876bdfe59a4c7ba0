# proclass/services/reminders/errors.py
from __future__ import annotations
from typing import Any


class ReminderError(RuntimeError):
    def __init__(self, code: str, data: Any = None):
        super().__init__(code)
        self.code = code
        self.data = data


class ConfigurationError(ReminderError):
    """Política ausente, desabilitada ou sem credenciais do canal."""


class ChannelSendError(ReminderError):
    """Falha de envio para um aluno (rede, número inválido, recusa do provedor)."""


class ConflictError(ReminderError):
    """Já existe registro no ledger para (professor, aluno, competência)."""


class AuthorizationError(ReminderError):
    """Token do disparo agendado não confere."""
