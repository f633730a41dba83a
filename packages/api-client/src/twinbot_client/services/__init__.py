"""Typed service clients, one per backend route group."""

from twinbot_client.services.auth import AuthService
from twinbot_client.services.base import BaseService
from twinbot_client.services.calendar import CalendarService
from twinbot_client.services.email import EmailService
from twinbot_client.services.twin import TwinService

__all__ = ["AuthService", "BaseService", "CalendarService", "EmailService", "TwinService"]
