# consultations/management/commands/send_consultation_reminders.py

from django.core.management.base import BaseCommand
from consultations.services.reminder_service import ConsultationReminderService

class Command(BaseCommand):
    """Django management command to send consultation reminders"""
    
    help = 'Send reminders for consultations starting soon'

    def handle(self, *args, **options):
        reminder_service = ConsultationReminderService()
        consultations = reminder_service.get_upcoming_reminders()
        
        self.stdout.write(f"Found {len(consultations)} consultations requiring reminders")
        
        sent_count = 0
        for consultation in consultations:
            if reminder_service.send_reminder(consultation):
                sent_count += 1
                
        self.stdout.write(self.style.SUCCESS(
            f"Successfully sent {sent_count} consultation reminders"
        ))
