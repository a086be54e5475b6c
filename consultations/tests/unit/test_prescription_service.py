# consultations/tests/unit/test_prescription_service.py
import pytest
from datetime import date
from unittest.mock import patch

from consultations.models import Medicine
from consultations.services.email_service import EmailService
from consultations.services.prescription_service import PrescriptionService


@pytest.fixture
def prescription_data():
    return {
        'diagnosis': 'Chronic Kidney Disease Stage 3',
        'notes': 'Limit sodium intake',
        'follow_up_date': date(2030, 1, 15),
        'follow_up_instructions': 'Repeat creatinine test before the visit',
        'medicines': [
            {'name': 'Amlodipine', 'dosage': '5mg', 'frequency': 'Once daily', 'duration': '30 days'},
            {'name': 'Sodium Bicarbonate', 'dosage': '500mg', 'frequency': 'Twice daily',
             'timing': 'After meals'},
        ],
    }


@pytest.mark.django_db
class TestAttachPrescription:
    @patch.object(EmailService, 'send_prescription', return_value=True)
    def test_attach_completes_consultation(self, mock_email, consultation, doctor_user, prescription_data):
        prescription = PrescriptionService.attach_prescription(
            consultation, prescription_data, doctor=doctor_user
        )

        assert prescription.doctor == doctor_user
        assert prescription.status == 'sent'
        assert list(prescription.medicines.values_list('name', flat=True).order_by('name')) == [
            'Amlodipine', 'Sodium Bicarbonate'
        ]
        consultation.refresh_from_db()
        assert consultation.status == 'completed'
        mock_email.assert_called_once_with(prescription)

    @patch.object(EmailService, 'send_prescription', return_value=False)
    def test_email_failure_keeps_draft(self, mock_email, consultation, prescription_data):
        prescription = PrescriptionService.attach_prescription(consultation, prescription_data)

        prescription.refresh_from_db()
        assert prescription.status == 'draft'
        consultation.refresh_from_db()
        assert consultation.status == 'completed'

    @patch.object(EmailService, 'send_prescription')
    def test_send_email_false_skips_email(self, mock_email, consultation, prescription_data):
        prescription = PrescriptionService.attach_prescription(
            consultation, prescription_data, send_email=False
        )

        mock_email.assert_not_called()
        assert prescription.status == 'draft'

    @patch.object(EmailService, 'send_prescription', return_value=True)
    def test_reattach_replaces_medicines(self, mock_email, prescription, consultation, prescription_data):
        prescription_data['medicines'] = [
            {'name': 'Furosemide', 'dosage': '40mg', 'frequency': 'Morning'},
        ]

        updated = PrescriptionService.attach_prescription(consultation, prescription_data)

        assert updated.pk == prescription.pk
        assert updated.diagnosis == 'Chronic Kidney Disease Stage 3'
        assert list(updated.medicines.values_list('name', flat=True)) == ['Furosemide']
        assert not Medicine.objects.filter(name='Potassium Citrate').exists()

    def test_input_dict_is_not_mutated(self, consultation, prescription_data):
        PrescriptionService.attach_prescription(consultation, prescription_data, send_email=False)
        assert len(prescription_data['medicines']) == 2
