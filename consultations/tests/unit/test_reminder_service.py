# consultations/tests/unit/test_reminder_service.py
import pytest
from datetime import timedelta
from unittest.mock import MagicMock, patch
from django.utils import timezone

from consultations.models import Consultation
from consultations.services.email_service import EmailService
from consultations.services.meeting_service import derive_room_url
from consultations.services.reminder_service import ConsultationReminderService


def book_at(patient, start, **extra):
    """Book a consultation whose slot starts at the given aware datetime"""
    local = timezone.localtime(start)
    return Consultation.objects.create(
        patient=patient,
        patient_name='Sarah Johnson',
        patient_email=patient.email,
        date=local.date(),
        time_slot=local.strftime('%I:%M %p'),
        **extra
    )


@pytest.fixture
def now():
    return timezone.now().replace(second=0, microsecond=0)


@pytest.fixture
def telegram():
    return MagicMock()


@pytest.fixture
def reminder_service(telegram):
    return ConsultationReminderService(telegram_service=telegram)


@pytest.mark.django_db
class TestUpcomingReminders:
    def test_selects_consultations_inside_window(self, patient_user, now, settings):
        settings.CONSULTATION_REMINDER_WINDOW_MINUTES = 30
        soon = book_at(patient_user, now + timedelta(minutes=15))
        book_at(patient_user, now + timedelta(hours=3))
        book_at(patient_user, now - timedelta(hours=1))

        assert ConsultationReminderService.get_upcoming_reminders(now=now) == [soon]

    def test_skips_flagged_and_inactive_consultations(self, patient_user, now):
        start = now + timedelta(minutes=10)
        book_at(patient_user, start, reminder_sent=True)
        book_at(patient_user, start, send_reminder=False)
        book_at(patient_user, start, status='cancelled')
        pending = book_at(patient_user, start, status='pending')

        assert ConsultationReminderService.get_upcoming_reminders(now=now) == [pending]

    def test_orders_by_start_time(self, patient_user, now):
        later = book_at(patient_user, now + timedelta(minutes=20))
        earlier = book_at(patient_user, now + timedelta(minutes=5))

        assert ConsultationReminderService.get_upcoming_reminders(now=now) == [earlier, later]


@pytest.mark.django_db
class TestSendReminder:
    @patch.object(EmailService, 'send_consultation_reminder', return_value=True)
    def test_send_reminder_marks_consultation(self, mock_email, reminder_service, telegram, consultation):
        assert reminder_service.send_reminder(consultation) is True

        expected_url = derive_room_url(consultation.consultation_id, consultation.patient_email)
        mock_email.assert_called_once_with(consultation, expected_url)
        telegram.notify_reminder.assert_called_once_with(consultation, expected_url)

        consultation.refresh_from_db()
        assert consultation.reminder_sent is True

    @patch.object(EmailService, 'send_consultation_reminder', return_value=False)
    def test_failed_email_leaves_flag_unset(self, mock_email, reminder_service, telegram, consultation):
        assert reminder_service.send_reminder(consultation) is False

        telegram.notify_reminder.assert_not_called()
        consultation.refresh_from_db()
        assert consultation.reminder_sent is False

    @patch.object(EmailService, 'send_consultation_reminder', side_effect=RuntimeError('boom'))
    def test_errors_are_contained(self, mock_email, reminder_service, consultation):
        assert reminder_service.send_reminder(consultation) is False

    @patch.object(EmailService, 'send_consultation_reminder', return_value=True)
    def test_process_reminders_counts_sent(self, mock_email, reminder_service, patient_user, now):
        book_at(patient_user, now + timedelta(minutes=5))
        book_at(patient_user, now + timedelta(minutes=25))

        assert reminder_service.process_reminders(now=now) == 2
        assert reminder_service.process_reminders(now=now) == 0


@pytest.mark.django_db
@patch.object(EmailService, 'send_consultation_reminder', return_value=True)
def test_send_consultation_reminders_command(mock_email, patient_user):
    from io import StringIO
    from django.core.management import call_command

    book_at(patient_user, timezone.now() + timedelta(minutes=10))
    out = StringIO()

    call_command('send_consultation_reminders', stdout=out)

    assert 'Found 1 consultations requiring reminders' in out.getvalue()
    assert 'Successfully sent 1 consultation reminders' in out.getvalue()
    assert Consultation.objects.get().reminder_sent is True
