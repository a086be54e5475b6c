# consultations/views.py
from rest_framework import viewsets, permissions, status, mixins
from rest_framework.response import Response
from rest_framework.decorators import action
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
import logging

from .models import Consultation, Prescription
from .serializers import (
    ConsultationSerializer, ConsultationStatusSerializer,
    PrescriptionSerializer, MeetingSerializer
)
from .permissions import IsPatient, IsDoctorOrAdmin, IsConsultationParticipant
from .services.meeting_service import get_meeting_service
from .services.email_service import EmailService
from .services.telegram_service import TelegramService
from .services.prescription_service import PrescriptionService

logger = logging.getLogger(__name__)


def _is_doctor_or_admin(user):
    return user.role in ['doctor', 'admin'] or user.is_staff


class ConsultationViewSet(mixins.CreateModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.ListModelMixin,
                          viewsets.GenericViewSet):
    """
    API endpoint for booking and managing video consultations
    """
    queryset = Consultation.objects.all()
    serializer_class = ConsultationSerializer
    permission_classes = [permissions.IsAuthenticated, IsConsultationParticipant]

    def get_queryset(self):
        user = self.request.user

        if _is_doctor_or_admin(user):
            return Consultation.objects.all()
        if user.role == 'patient':
            return Consultation.objects.filter(patient=user)

        return Consultation.objects.none()

    def get_permissions(self):
        if self.action == 'create':
            return [permissions.IsAuthenticated(), IsPatient()]
        if self.action in ['update_status', 'prescription', 'stats', 'dashboard']:
            return [permissions.IsAuthenticated(), IsDoctorOrAdmin()]
        return super().get_permissions()

    def perform_create(self, serializer):
        """Book the consultation, attach its meeting link and notify both sides"""
        user = self.request.user
        consultation = serializer.save(
            patient=user,
            patient_name=user.get_full_name() or user.username,
            patient_email=user.email,
            patient_phone=user.phone_number,
            country=user.country,
        )

        meeting_url = get_meeting_service().patient_meeting_url(
            consultation.consultation_id, consultation.patient_email
        )
        consultation.meeting_link = meeting_url
        consultation.save(update_fields=['meeting_link', 'updated_at'])

        EmailService.send_booking_confirmation(consultation, meeting_url)
        TelegramService().notify_new_consultation(consultation, meeting_url)

        logger.info(f"Consultation {consultation.pk} booked for {consultation.patient_email}")
        return consultation

    @swagger_auto_schema(
        operation_description="Get the authenticated patient's consultations",
        responses={200: ConsultationSerializer(many=True)}
    )
    @action(detail=False, methods=['get'])
    def mine(self, request):
        """Get the authenticated user's own bookings"""
        consultations = Consultation.objects.filter(patient=request.user)
        serializer = self.get_serializer(consultations, many=True)
        return Response(serializer.data)

    @swagger_auto_schema(
        operation_description="Get upcoming consultations",
        responses={200: ConsultationSerializer(many=True)}
    )
    @action(detail=False, methods=['get'])
    def upcoming(self, request):
        """Get consultations that have not happened yet"""
        consultations = [c for c in self.get_queryset() if c.is_upcoming()]
        consultations.sort(key=lambda c: c.scheduled_at())
        serializer = self.get_serializer(consultations, many=True)
        return Response(serializer.data)

    @swagger_auto_schema(
        operation_description="Update consultation status",
        request_body=ConsultationStatusSerializer,
        responses={
            200: ConsultationSerializer(),
            400: "Invalid status"
        }
    )
    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        """Update the status of a consultation"""
        consultation = self.get_object()
        status_serializer = ConsultationStatusSerializer(data=request.data)
        if not status_serializer.is_valid():
            return Response(
                {'error': 'Invalid status', 'details': status_serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        new_status = status_serializer.validated_data['status']
        previous_status = consultation.status
        consultation.status = new_status
        consultation.save(update_fields=['status', 'updated_at'])

        if new_status == 'cancelled' and previous_status != 'cancelled':
            get_meeting_service().delete_meeting(consultation.consultation_id)
            EmailService.send_cancellation(consultation)

        logger.info(f"Consultation {consultation.pk} status updated to {new_status}")
        return Response(self.get_serializer(consultation).data)

    @swagger_auto_schema(
        operation_description="Get the meeting link for the consultation",
        responses={
            200: MeetingSerializer(),
            400: "This consultation has been cancelled"
        }
    )
    @action(detail=True, methods=['get'])
    def meeting(self, request, pk=None):
        """Resolve the Join Meeting link for the patient or the doctor"""
        consultation = self.get_object()

        if consultation.status == 'cancelled':
            return Response(
                {'error': 'This consultation has been cancelled'},
                status=status.HTTP_400_BAD_REQUEST
            )

        meeting_service = get_meeting_service()
        if _is_doctor_or_admin(request.user):
            meeting_url = meeting_service.doctor_meeting_url(
                consultation.consultation_id, consultation.patient_email
            )
            details = meeting_service.add_doctor_to_meeting(
                consultation.consultation_id, consultation.patient_email, request.user.email
            )
        else:
            meeting_url = meeting_service.patient_meeting_url(
                consultation.consultation_id, consultation.patient_email
            )
            details = meeting_service.get_meeting(
                consultation.consultation_id, consultation.patient_email
            )

        return Response({
            'consultation_id': consultation.consultation_id,
            'meeting_url': meeting_url,
            'room_code': details.room_code,
        })

    @swagger_auto_schema(
        operation_description="Attach a prescription and complete the consultation",
        request_body=PrescriptionSerializer,
        responses={
            201: PrescriptionSerializer(),
            400: "Invalid prescription"
        }
    )
    @action(detail=True, methods=['post'])
    def prescription(self, request, pk=None):
        """Attach a prescription to the consultation"""
        consultation = self.get_object()

        if consultation.status == 'cancelled':
            return Response(
                {'error': 'Cannot prescribe for a cancelled consultation'},
                status=status.HTTP_400_BAD_REQUEST
            )

        serializer = PrescriptionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        send_email = data.pop('send_email', True)

        prescription = PrescriptionService.attach_prescription(
            consultation, data, doctor=request.user, send_email=send_email
        )
        return Response(PrescriptionSerializer(prescription).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="Consultation counters for the admin dashboard",
        responses={
            200: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'total_consultations': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'completed_consultations': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'active_consultations': openapi.Schema(type=openapi.TYPE_INTEGER),
                }
            )
        }
    )
    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Count total, completed and active consultations"""
        return Response({
            'total_consultations': Consultation.objects.count(),
            'completed_consultations': Consultation.objects.filter(status='completed').count(),
            'active_consultations': Consultation.objects.filter(
                status__in=Consultation.ACTIVE_STATUSES
            ).count(),
        })

    @swagger_auto_schema(
        operation_description="All consultations with their meeting links for the doctor dashboard",
        responses={200: ConsultationSerializer(many=True)}
    )
    @action(detail=False, methods=['get'])
    def dashboard(self, request):
        """List every consultation with a resolved meeting link"""
        consultations = list(Consultation.objects.all())
        meeting_service = get_meeting_service()
        meeting_service.rehydrate(consultations)

        data = []
        for consultation in consultations:
            item = self.get_serializer(consultation).data
            item['meeting_url'] = None
            if consultation.status != 'cancelled':
                item['meeting_url'] = meeting_service.doctor_meeting_url(
                    consultation.consultation_id, consultation.patient_email
                )
            data.append(item)
        return Response(data)


class PrescriptionViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for reading prescriptions
    """
    queryset = Prescription.objects.all()
    serializer_class = PrescriptionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user

        if _is_doctor_or_admin(user):
            return Prescription.objects.all()
        if user.role == 'patient':
            return Prescription.objects.filter(consultation__patient=user)

        return Prescription.objects.none()
