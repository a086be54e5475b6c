# consultations/permissions.py
from rest_framework import permissions


class IsPatient(permissions.BasePermission):
    """
    Only patients may book consultations.
    """
    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == 'patient'


class IsDoctorOrAdmin(permissions.BasePermission):
    """
    Doctor and admin accounts (or staff) manage consultations and prescriptions.
    """
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.role in ['doctor', 'admin'] or request.user.is_staff


class IsConsultationParticipant(permissions.BasePermission):
    """
    The booking patient, or any doctor/admin, may access a consultation.
    """
    def has_object_permission(self, request, view, obj):
        if request.user.role in ['doctor', 'admin'] or request.user.is_staff:
            return True
        return request.user == obj.patient
