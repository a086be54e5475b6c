# consultations/services/reminder_service.py

from datetime import timedelta
from django.conf import settings
from django.utils import timezone
from .email_service import EmailService
from .meeting_service import get_meeting_service
from .telegram_service import TelegramService
import logging

logger = logging.getLogger(__name__)


class ConsultationReminderService:
    """Service for finding and sending reminders for consultations about to start"""

    def __init__(self, meeting_service=None, telegram_service=None):
        self.meeting_service = meeting_service or get_meeting_service()
        self.telegram_service = telegram_service or TelegramService()

    @staticmethod
    def get_upcoming_reminders(now=None):
        """
        Get consultations that start within the reminder window and still need a reminder

        Returns:
            list: Consultations needing reminders, earliest first
        """
        from ..models import Consultation

        now = now or timezone.now()
        window_end = now + timedelta(minutes=settings.CONSULTATION_REMINDER_WINDOW_MINUTES)

        # Slots are stored as date + 12-hour text, so narrow by date in SQL
        # and compare the exact start time in Python
        local_now = timezone.localtime(now)
        local_end = timezone.localtime(window_end)
        candidates = Consultation.objects.filter(
            date__range=(local_now.date(), local_end.date()),
            status__in=Consultation.ACTIVE_STATUSES,
            send_reminder=True,
            reminder_sent=False
        )

        due = [c for c in candidates if now <= c.scheduled_at() <= window_end]
        return sorted(due, key=lambda c: c.scheduled_at())

    def send_reminder(self, consultation):
        """
        Send reminder email to the patient and a heads-up to the doctor

        Args:
            consultation: The consultation object

        Returns:
            bool: True if the patient reminder was sent, False otherwise
        """
        try:
            meeting_url = self.meeting_service.patient_meeting_url(
                consultation.consultation_id, consultation.patient_email
            )

            email_sent = EmailService.send_consultation_reminder(consultation, meeting_url)
            if not email_sent:
                return False

            consultation.reminder_sent = True
            consultation.save(update_fields=['reminder_sent', 'updated_at'])

            self.telegram_service.notify_reminder(consultation, meeting_url)
            return True

        except Exception as e:
            logger.error(f"Error sending reminder for consultation {consultation.pk}: {str(e)}")
            return False

    def process_reminders(self, now=None):
        """Send every due reminder; returns how many went out"""
        sent_count = 0
        for consultation in self.get_upcoming_reminders(now=now):
            if self.send_reminder(consultation):
                sent_count += 1
        return sent_count
