# consultations/models.py
import re
from datetime import datetime, time

from django.db import models
from django.conf import settings
from django.utils import timezone

TIME_SLOT_PATTERN = re.compile(r'(\d{1,2}):(\d{2})\s*(AM|PM)', re.IGNORECASE)


def parse_time_slot(time_slot):
    """Convert a 12-hour slot like '10:30 PM' to a time; 09:00 when unparseable"""
    match = TIME_SLOT_PATTERN.search(str(time_slot or ''))
    if not match:
        return time(9, 0)
    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if hours == 12:
        hours = 12 if meridiem == 'PM' else 0
    elif meridiem == 'PM':
        hours += 12
    return time(hours % 24, minutes % 60)


class Consultation(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    ACTIVE_STATUSES = ['pending', 'confirmed']

    CONSULTATION_TYPE_CHOICES = [
        ('initial', 'Initial Consultation'),
        ('follow_up', 'Follow-up'),
        ('urgent', 'Urgent Consultation'),
    ]

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='patient_consultations',
        limit_choices_to={'role': 'patient'}
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='doctor_consultations',
        limit_choices_to={'role': 'doctor'}
    )

    # Snapshot of the patient at booking time
    patient_name = models.CharField(max_length=255)
    patient_email = models.EmailField()
    patient_phone = models.CharField(max_length=20, blank=True, null=True)
    country = models.CharField(max_length=2, blank=True, null=True)

    date = models.DateField()
    time_slot = models.CharField(max_length=20)  # e.g. "10:00 AM"
    consultation_type = models.CharField(
        max_length=20,
        choices=CONSULTATION_TYPE_CHOICES,
        default='initial'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='confirmed')

    amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default='INR')

    meeting_link = models.URLField(blank=True, null=True)
    intake_description = models.TextField(blank=True, null=True)

    send_reminder = models.BooleanField(default=True)
    reminder_sent = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.patient_name} on {self.date} at {self.time_slot}"

    @property
    def consultation_id(self):
        return str(self.pk)

    def scheduled_at(self):
        """Start of the consultation as an aware datetime in the server timezone"""
        naive = datetime.combine(self.date, parse_time_slot(self.time_slot))
        return timezone.make_aware(naive, timezone.get_current_timezone())

    def is_upcoming(self):
        return self.scheduled_at() > timezone.now() and self.status in self.ACTIVE_STATUSES


class Prescription(models.Model):
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
    ]

    consultation = models.OneToOneField(Consultation, on_delete=models.CASCADE, related_name='prescription')
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='written_prescriptions'
    )
    diagnosis = models.TextField()
    notes = models.TextField(blank=True, null=True)
    follow_up_date = models.DateField(blank=True, null=True)
    follow_up_instructions = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='draft')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Prescription for {self.consultation.patient_name}"


class Medicine(models.Model):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='medicines')
    name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=100)
    frequency = models.CharField(max_length=100)
    duration = models.CharField(max_length=100, blank=True, default='')
    timing = models.CharField(max_length=100, blank=True, default='')
    instructions = models.TextField(blank=True, null=True)
    link = models.URLField(blank=True, null=True)

    def __str__(self):
        return f"{self.name} {self.dosage}"
