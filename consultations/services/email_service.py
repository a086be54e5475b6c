# consultations/services/email_service.py

import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from django.conf import settings
from django.utils.html import escape
import logging

logger = logging.getLogger(__name__)

SIGNATURE = "NephroConsult"


class EmailService:
    """Service for sending consultation emails over SMTP"""

    @staticmethod
    def send_email(recipient_email, subject, html_content, text_content=None):
        """
        Send an email using the configured SMTP server

        Args:
            recipient_email (str): Email address of the recipient
            subject (str): Email subject
            html_content (str): HTML content of the email
            text_content (str): Plain text alternative (optional)

        Returns:
            bool: True if email was sent successfully, False otherwise
        """
        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = settings.EMAIL_HOST_USER
            msg['To'] = recipient_email

            if text_content is None:
                text_content = "Please view this email in an HTML compatible email client."

            msg.attach(MIMEText(text_content, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT)
            server.ehlo()
            if settings.EMAIL_USE_TLS:
                server.starttls()
            if settings.EMAIL_HOST_USER:
                server.login(settings.EMAIL_HOST_USER, settings.EMAIL_HOST_PASSWORD)
            server.sendmail(settings.EMAIL_HOST_USER, recipient_email, msg.as_string())
            server.close()

            logger.info(f"Email sent successfully to {recipient_email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {recipient_email}: {str(e)}")
            return False

    @staticmethod
    def _render(heading, name, intro, details, closing):
        """Build the HTML and plain text bodies shared by all consultation emails"""
        html_items = ''.join(
            f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>" for label, value in details if value
        )
        text_items = '\n'.join(f"{label}: {value}" for label, value in details if value)

        html_content = f"""
        <html>
        <body>
            <h2>{escape(heading)}</h2>
            <p>Dear {escape(name)},</p>
            <p>{escape(intro)}</p>
            <ul>{html_items}</ul>
            <p>{escape(closing)}</p>
            <p>Thank you,<br>
            {SIGNATURE}</p>
        </body>
        </html>
        """

        text_content = f"""{heading.upper()}

Dear {name},

{intro}

{text_items}

{closing}

Thank you,
{SIGNATURE}
"""
        return html_content, text_content

    @classmethod
    def _consultation_details(cls, consultation, meeting_url=None):
        return [
            ('Doctor', settings.DOCTOR_DISPLAY_NAME),
            ('Date', consultation.date.strftime("%A, %B %d, %Y")),
            ('Time', consultation.time_slot),
            ('Type', consultation.get_consultation_type_display()),
            ('Meeting link', meeting_url),
        ]

    @classmethod
    def send_booking_confirmation(cls, consultation, meeting_url):
        """Send confirmation email with the join link for a new booking"""
        if not consultation.patient_email:
            logger.warning(f"Cannot send confirmation: consultation {consultation.pk} has no patient email")
            return False

        html_content, text_content = cls._render(
            heading="Consultation Confirmed",
            name=consultation.patient_name,
            intro="Your video consultation has been booked successfully:",
            details=cls._consultation_details(consultation, meeting_url),
            closing="Please join the meeting a few minutes before your scheduled time.",
        )

        return cls.send_email(
            recipient_email=consultation.patient_email,
            subject=f"Consultation Confirmed: {consultation.date} at {consultation.time_slot}",
            html_content=html_content,
            text_content=text_content
        )

    @classmethod
    def send_cancellation(cls, consultation):
        """Send email telling the patient their consultation was cancelled"""
        if not consultation.patient_email:
            logger.warning(f"Cannot send cancellation: consultation {consultation.pk} has no patient email")
            return False

        html_content, text_content = cls._render(
            heading="Consultation Cancelled",
            name=consultation.patient_name,
            intro="Your consultation has been cancelled:",
            details=cls._consultation_details(consultation),
            closing="If you need to reschedule, please book a new consultation.",
        )

        return cls.send_email(
            recipient_email=consultation.patient_email,
            subject=f"Consultation Cancelled: {consultation.date} at {consultation.time_slot}",
            html_content=html_content,
            text_content=text_content
        )

    @classmethod
    def send_consultation_reminder(cls, consultation, meeting_url):
        """Send a reminder shortly before the consultation starts"""
        if not consultation.patient_email:
            logger.warning(f"Cannot send reminder: consultation {consultation.pk} has no patient email")
            return False

        html_content, text_content = cls._render(
            heading="Consultation Reminder",
            name=consultation.patient_name,
            intro="This is a reminder of your upcoming video consultation:",
            details=cls._consultation_details(consultation, meeting_url),
            closing="Please keep your recent lab reports at hand.",
        )

        return cls.send_email(
            recipient_email=consultation.patient_email,
            subject=f"Reminder: Your consultation with {settings.DOCTOR_DISPLAY_NAME} starts soon",
            html_content=html_content,
            text_content=text_content
        )

    @classmethod
    def send_prescription(cls, prescription):
        """Email a prescription to the patient of its consultation"""
        consultation = prescription.consultation
        if not consultation.patient_email:
            logger.warning(f"Cannot send prescription: consultation {consultation.pk} has no patient email")
            return False

        details = [('Diagnosis', prescription.diagnosis)]
        for medicine in prescription.medicines.all():
            parts = [part for part in (medicine.dosage, medicine.frequency, medicine.duration) if part]
            details.append((medicine.name, ', '.join(parts)))
        details.append(('Notes', prescription.notes))
        if prescription.follow_up_date:
            details.append(('Next visit', prescription.follow_up_date.strftime("%B %d, %Y")))
        details.append(('Follow-up instructions', prescription.follow_up_instructions))

        html_content, text_content = cls._render(
            heading="Your Prescription",
            name=consultation.patient_name,
            intro=f"Your digital prescription from the consultation on {consultation.date} is below and also available on your profile.",
            details=details,
            closing="Take medications as prescribed.",
        )

        return cls.send_email(
            recipient_email=consultation.patient_email,
            subject="Your prescription is available - NephroConsult",
            html_content=html_content,
            text_content=text_content
        )
