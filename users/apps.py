# users/apps.py
from django.apps import AppConfig

class UsersConfig(AppConfig):
    """
    Application configuration for the users app.
    
    Holds the account model shared by patients booking consultations and the
    doctor/admin staff who run them.
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'users'
