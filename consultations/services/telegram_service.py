# consultations/services/telegram_service.py
import logging
import requests
from django.conf import settings
from django.utils.html import escape

logger = logging.getLogger(__name__)


class TelegramService:
    """Service for notifying the doctor about consultations through a Telegram bot"""

    def __init__(self):
        self.bot_token = settings.TELEGRAM_BOT_TOKEN
        self.chat_id = settings.DOCTOR_TELEGRAM_CHAT_ID
        self.base_url = f"{settings.TELEGRAM_API_URL}/bot{self.bot_token}"

    @property
    def is_configured(self):
        return bool(self.bot_token and self.chat_id)

    def send_message(self, text):
        """
        Send an HTML message to the doctor's chat

        Args:
            text (str): HTML-formatted message body

        Returns:
            bool: True if Telegram accepted the message, False otherwise
        """
        if not self.is_configured:
            logger.info("Telegram bot not configured, skipping notification")
            return False

        try:
            response = requests.post(
                f'{self.base_url}/sendMessage',
                json={'chat_id': self.chat_id, 'text': text, 'parse_mode': 'HTML'},
                timeout=10
            )
        except requests.RequestException as e:
            logger.error(f"Failed to reach Telegram: {str(e)}")
            return False

        if response.status_code == 200:
            return True

        logger.error(f"Telegram rejected message: {response.text}")
        return False

    def notify_new_consultation(self, consultation, meeting_url):
        text = (
            "<b>NEW CONSULTATION BOOKED</b>\n\n"
            f"<b>Patient:</b> {escape(consultation.patient_name)}\n"
            f"<b>Email:</b> {escape(consultation.patient_email)}\n"
            f"<b>Phone:</b> {escape(consultation.patient_phone or 'N/A')}\n"
            f"<b>Country:</b> {escape(consultation.country or 'N/A')}\n"
            f"<b>Date:</b> {consultation.date.strftime('%A, %B %d, %Y')}\n"
            f"<b>Time:</b> {escape(consultation.time_slot)}\n"
            f"<b>Type:</b> {consultation.get_consultation_type_display()}\n"
            f"<b>Meeting:</b> {escape(meeting_url)}"
        )
        return self.send_message(text)

    def notify_reminder(self, consultation, meeting_url):
        text = (
            "<b>CONSULTATION STARTING SOON</b>\n\n"
            f"<b>Patient:</b> {escape(consultation.patient_name)}\n"
            f"<b>Time:</b> {escape(consultation.time_slot)}\n"
            f"<b>Meeting:</b> {escape(meeting_url)}"
        )
        return self.send_message(text)
