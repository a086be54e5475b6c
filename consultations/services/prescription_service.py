# consultations/services/prescription_service.py
import logging
from django.db import transaction

from .email_service import EmailService

logger = logging.getLogger(__name__)


class PrescriptionService:
    """Attaches prescriptions to consultations and closes them out"""

    @staticmethod
    def attach_prescription(consultation, data, doctor=None, send_email=True):
        """
        Create or replace the prescription of a consultation

        The consultation is marked completed in the same transaction. Emailing
        the patient is best-effort and never undoes the save.

        Args:
            consultation: The consultation object
            data (dict): Validated prescription fields plus a `medicines` list
            doctor: User writing the prescription (optional)
            send_email (bool): Whether to email the patient

        Returns:
            Prescription: The saved prescription
        """
        from ..models import Prescription, Medicine

        data = dict(data)
        medicines = data.pop('medicines', [])

        with transaction.atomic():
            prescription, created = Prescription.objects.update_or_create(
                consultation=consultation,
                defaults={**data, 'doctor': doctor, 'status': 'draft'}
            )
            if not created:
                prescription.medicines.all().delete()
            Medicine.objects.bulk_create([
                Medicine(prescription=prescription, **medicine) for medicine in medicines
            ])

            consultation.status = 'completed'
            consultation.save(update_fields=['status', 'updated_at'])

        logger.info(f"Prescription added to consultation {consultation.pk}")

        if send_email:
            if EmailService.send_prescription(prescription):
                prescription.status = 'sent'
                prescription.save(update_fields=['status', 'updated_at'])
            else:
                logger.warning(f"Prescription email for consultation {consultation.pk} was not delivered")

        return prescription
