# users/serializers.py
from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.hashers import make_password
from .models import CustomUser


class CustomUserSerializer(serializers.ModelSerializer):
    """Serializer for user listing and basic info"""
    
    role_display = serializers.CharField(source='get_role_display', read_only=True)
    
    class Meta:
        model = CustomUser
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 
            'role', 'role_display', 'phone_number', 'country',
            'date_joined', 'last_login'
        ]
        read_only_fields = ['role', 'date_joined', 'last_login']


class UserRegistrationSerializer(serializers.ModelSerializer):
    """Serializer for patient self-registration"""
    
    password = serializers.CharField(write_only=True, required=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True, required=True)
    terms_accepted = serializers.BooleanField(required=True)
    
    class Meta:
        model = CustomUser
        fields = [
            'username', 'email', 'password', 'password_confirm',
            'first_name', 'last_name', 'phone_number', 'country',
            'terms_accepted'
        ]
        extra_kwargs = {'email': {'required': True}}
    
    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password_confirm": "Passwords don't match"})
        
        if not attrs['terms_accepted']:
            raise serializers.ValidationError({"terms_accepted": "You must accept the terms and conditions"})
        
        return attrs
    
    def validate_email(self, value):
        return value.lower()
    
    def create(self, validated_data):
        validated_data.pop('password_confirm')
        validated_data.pop('terms_accepted')
        
        validated_data['password'] = make_password(validated_data['password'])
        
        # Self-registration always creates patients; doctors are provisioned by staff
        user = CustomUser.objects.create(role='patient', **validated_data)
        user.accept_terms()
        
        return user
