# consultations/admin.py
from django.contrib import admin
from .models import Consultation, Prescription, Medicine


class MedicineInline(admin.TabularInline):
    model = Medicine
    extra = 0


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_name', 'patient_email', 'date', 'time_slot', 'consultation_type', 'status')
    list_filter = ('status', 'consultation_type', 'country')
    search_fields = ('patient_name', 'patient_email')
    readonly_fields = ('meeting_link', 'created_at', 'updated_at')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('consultation', 'doctor', 'status', 'created_at')
    list_filter = ('status',)
    inlines = [MedicineInline]
