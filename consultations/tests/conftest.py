"""
Fixtures for consultations application tests.

This module provides common fixtures that can be reused across different tests
to reduce duplication and improve maintainability.
"""
import pytest
from datetime import timedelta
from django.utils import timezone
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from consultations.models import Consultation, Prescription, Medicine
from consultations.services.meeting_service import get_meeting_service

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_meeting_cache():
    """Start every test with an empty process-wide meeting cache"""
    get_meeting_service().reset()
    yield
    get_meeting_service().reset()

# ================= User fixtures =================

@pytest.fixture
def patient_user(db):
    """Create and return a test patient user"""
    return User.objects.create_user(
        username='testpatient',
        email='testpatient@example.com',
        password='testpass123',
        role='patient',
        first_name='Sarah',
        last_name='Johnson',
        country='US'
    )

@pytest.fixture
def doctor_user(db):
    """Create and return a test doctor user"""
    return User.objects.create_user(
        username='testdoctor',
        email='doctor@example.com',
        password='testpass123',
        role='doctor',
        first_name='Ilango',
        last_name='Prakasam'
    )

@pytest.fixture
def admin_user(db):
    """Create and return a test admin user"""
    return User.objects.create_user(
        username='testadmin',
        email='admin@example.com',
        password='testpass123',
        role='admin',
        is_staff=True
    )

# ================= API Client fixtures =================

@pytest.fixture
def api_client():
    """Return an unauthenticated API client"""
    return APIClient()

@pytest.fixture
def patient_client(patient_user):
    """Return an API client authenticated as a patient"""
    client = APIClient()
    client.force_authenticate(user=patient_user)
    return client

@pytest.fixture
def doctor_client(doctor_user):
    """Return an API client authenticated as a doctor"""
    client = APIClient()
    client.force_authenticate(user=doctor_user)
    return client

# ================= Model fixtures =================

@pytest.fixture
def tomorrow():
    return timezone.localdate() + timedelta(days=1)

@pytest.fixture
def consultation(patient_user, tomorrow):
    """Create and return a booked consultation"""
    return Consultation.objects.create(
        patient=patient_user,
        patient_name='Sarah Johnson',
        patient_email=patient_user.email,
        date=tomorrow,
        time_slot='10:00 AM',
        consultation_type='initial',
        amount=49,
        currency='USD'
    )

@pytest.fixture
def prescription(consultation, doctor_user):
    """Create and return a prescription with one medicine"""
    prescription = Prescription.objects.create(
        consultation=consultation,
        doctor=doctor_user,
        diagnosis='Stage 2 CKD',
        notes='Increase water intake to 3 liters daily'
    )
    Medicine.objects.create(
        prescription=prescription,
        name='Potassium Citrate',
        dosage='10mg',
        frequency='Twice daily',
        duration='30 days'
    )
    return prescription
