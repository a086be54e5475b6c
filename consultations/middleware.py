# consultations/middleware.py
import logging
import json
from django.utils import timezone

logger = logging.getLogger('hipaa_audit')

AUDITED_PREFIX = '/api/v1/'
AUDITED_RESOURCES = ('consultations', 'prescriptions')


class HIPAAComplianceMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated and request.path.startswith(AUDITED_PREFIX):
            resource = request.path[len(AUDITED_PREFIX):].split('/')[0]
            if resource in AUDITED_RESOURCES:
                self.log_patient_data_access(request, response, resource)
        
        return response
    
    def log_patient_data_access(self, request, response, resource):
        # Log only successful requests
        if not 200 <= response.status_code < 300:
            return
        
        log_data = {
            'timestamp': timezone.now().isoformat(),
            'user_id': request.user.id,
            'username': request.user.username,
            'user_role': request.user.role,
            'path': request.path,
            'method': request.method,
            'ip': request.META.get('REMOTE_ADDR', ''),
            'user_agent': request.META.get('HTTP_USER_AGENT', '')
        }
        
        # Record which record was touched when the URL names one
        parts = [part for part in request.path.split('/') if part]
        idx = parts.index(resource)
        if idx + 1 < len(parts) and parts[idx + 1].isdigit():
            log_data[f'{resource[:-1]}_id'] = parts[idx + 1]
        
        logger.info(f"HIPAA_ACCESS: {json.dumps(log_data)}")
