# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class CustomUser(AbstractUser):
    """
    User model with role-based access for the consultation platform
    """
    ROLE_CHOICES = [
        ('patient', 'Patient'),
        ('doctor', 'Doctor'),
        ('admin', 'Admin'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='patient')
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    country = models.CharField(max_length=2, blank=True, null=True)  # ISO 3166-1 alpha-2
    
    # Terms and privacy policy agreement
    terms_accepted = models.BooleanField(default=False)
    terms_accepted_date = models.DateTimeField(blank=True, null=True)
    
    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
    
    @property
    def is_doctor_or_admin(self):
        return self.role in ('doctor', 'admin') or self.is_staff
    
    def accept_terms(self):
        """Record acceptance of terms and conditions"""
        self.terms_accepted = True
        self.terms_accepted_date = timezone.now()
        self.save(update_fields=['terms_accepted', 'terms_accepted_date'])
