# users/views.py
from rest_framework import viewsets, permissions, mixins
from rest_framework.response import Response
from rest_framework.decorators import action
from drf_yasg.utils import swagger_auto_schema

from .models import CustomUser
from .serializers import CustomUserSerializer, UserRegistrationSerializer


class UserViewSet(mixins.CreateModelMixin,
                  mixins.RetrieveModelMixin,
                  mixins.ListModelMixin,
                  viewsets.GenericViewSet):
    """
    API endpoint for patient registration and account lookup
    """
    queryset = CustomUser.objects.all()
    serializer_class = CustomUserSerializer
    permission_classes = [permissions.IsAuthenticated]
    
    def get_serializer_class(self):
        if self.action == 'create':
            return UserRegistrationSerializer
        return CustomUserSerializer
    
    def get_permissions(self):
        # Allow registration without authentication
        if self.action == 'create':
            return [permissions.AllowAny()]
        return super().get_permissions()
    
    def get_queryset(self):
        user = self.request.user
        
        # Doctors and admins can look up any account, patients only themselves
        if user.is_doctor_or_admin:
            queryset = CustomUser.objects.all()
            role = self.request.query_params.get('role')
            if role:
                queryset = queryset.filter(role=role)
            return queryset
        
        return CustomUser.objects.filter(pk=user.pk)
    
    @swagger_auto_schema(
        operation_description="Get current authenticated user's details",
        responses={
            200: CustomUserSerializer,
            401: 'Unauthorized'
        }
    )
    @action(detail=False, methods=['get'])
    def me(self, request):
        """Get current authenticated user's details"""
        serializer = self.get_serializer(request.user)
        return Response(serializer.data)
