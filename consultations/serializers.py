# consultations/serializers.py
from django.utils import timezone
from rest_framework import serializers

from .models import Consultation, Prescription, Medicine, TIME_SLOT_PATTERN


class MedicineSerializer(serializers.ModelSerializer):
    class Meta:
        model = Medicine
        fields = [
            'id', 'name', 'dosage', 'frequency', 'duration',
            'timing', 'instructions', 'link'
        ]


class PrescriptionSerializer(serializers.ModelSerializer):
    medicines = MedicineSerializer(many=True)
    send_email = serializers.BooleanField(write_only=True, required=False, default=True)

    class Meta:
        model = Prescription
        fields = [
            'id', 'consultation', 'doctor', 'diagnosis', 'notes',
            'follow_up_date', 'follow_up_instructions', 'status',
            'medicines', 'send_email', 'created_at', 'updated_at'
        ]
        read_only_fields = ['consultation', 'doctor', 'status', 'created_at', 'updated_at']

    def validate_medicines(self, value):
        if not value:
            raise serializers.ValidationError("At least one medicine is required.")
        return value


class ConsultationSerializer(serializers.ModelSerializer):
    consultation_type_display = serializers.CharField(source='get_consultation_type_display', read_only=True)
    prescription = PrescriptionSerializer(read_only=True, allow_null=True)

    class Meta:
        model = Consultation
        fields = [
            'id', 'patient', 'doctor', 'patient_name', 'patient_email',
            'patient_phone', 'country', 'date', 'time_slot',
            'consultation_type', 'consultation_type_display', 'status',
            'amount', 'currency', 'meeting_link', 'intake_description',
            'send_reminder', 'reminder_sent', 'prescription',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'patient', 'doctor', 'patient_name', 'patient_email',
            'patient_phone', 'country', 'status', 'meeting_link',
            'reminder_sent', 'created_at', 'updated_at'
        ]

    def validate_date(self, value):
        if value < timezone.localdate():
            raise serializers.ValidationError("Consultations cannot be booked in the past.")
        return value

    def validate_time_slot(self, value):
        if not TIME_SLOT_PATTERN.fullmatch(value.strip()):
            raise serializers.ValidationError("Time slot must look like '10:30 AM'.")
        return value.strip()

    def validate_currency(self, value):
        return value.upper()


class ConsultationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Consultation.STATUS_CHOICES)


class MeetingSerializer(serializers.Serializer):
    consultation_id = serializers.CharField()
    meeting_url = serializers.URLField()
    room_code = serializers.CharField()
