# consultations/apps.py
from django.apps import AppConfig


class ConsultationsConfig(AppConfig):
    """
    Application configuration for the consultations app.
    
    Owns the process-wide MeetingService so every view resolves meeting
    rooms through the same cache.
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'consultations'
    meeting_service = None
    
    def ready(self):
        from .services.meeting_service import MeetingService
        self.meeting_service = MeetingService()
