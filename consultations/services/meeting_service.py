# consultations/services/meeting_service.py
import logging
import re
import threading
import uuid
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

MEET_BASE_URL = 'https://meet.google.com/'
BASE36_ALPHABET = '0123456789abcdefghijklmnopqrstuvwxyz'

# abs(int32) never needs more than 6 base-36 digits, so codes are zero-padded
ROOM_CODE_DIGITS = 10
ROOM_CODE_GROUPS = ((0, 3), (3, 7), (7, 10))

ROOM_CODE_PATTERN = re.compile(r'meet\.google\.com/(.+)$')


def _to_int32(value):
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        return value - 0x100000000
    return value


def js_string_hash(value):
    """
    Hash a string the way `hash = ((hash << 5) - hash) + charCode` does in JavaScript

    Every UTF-16 code unit of the string is folded in and the running value is
    wrapped to a signed 32-bit integer after each step.

    Args:
        value (str): String to hash

    Returns:
        int: Signed 32-bit hash
    """
    data = value.encode('utf-16-le', errors='surrogatepass')
    result = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        result = _to_int32((result << 5) - result + code_unit)
    return result


def to_base36(number):
    """Render a non-negative integer with digits 0-9a-z"""
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return ''.join(reversed(digits))


def derive_room_code(consultation_id, patient_email):
    """
    Derive the meeting room code for a consultation

    The code depends only on the two inputs, so a patient view and a doctor
    view resolve the same room without sharing any state. Empty strings are
    accepted and hashed like any other input.

    Args:
        consultation_id (str): Consultation identifier
        patient_email (str): Email of the patient who booked it

    Returns:
        str: Room code shaped like `xxx-yyyy-zzz`
    """
    combined = f"{consultation_id}-{patient_email}"
    digits = to_base36(abs(js_string_hash(combined))).rjust(ROOM_CODE_DIGITS, '0')
    return '-'.join(digits[start:end] for start, end in ROOM_CODE_GROUPS)


def derive_room_url(consultation_id, patient_email):
    """
    Derive the meeting URL for a consultation

    Args:
        consultation_id (str): Consultation identifier
        patient_email (str): Email of the patient who booked it

    Returns:
        str: Full Google Meet URL
    """
    return f"{MEET_BASE_URL}{derive_room_code(consultation_id, patient_email)}"


def extract_room_code(meeting_url):
    """Return the `<code>` of a `meet.google.com/<code>` URL, or None"""
    if not meeting_url:
        return None
    match = ROOM_CODE_PATTERN.search(meeting_url)
    return match.group(1) if match else None


class MeetingDetails:
    """A meeting room resolved for one consultation"""

    def __init__(self, consultation_id, patient_email, url, room_code,
                 created_at=None, ttl=None, doctor_email=None):
        self.meeting_id = f"meeting_{uuid.uuid4().hex[:12]}"
        self.consultation_id = consultation_id
        self.patient_email = patient_email
        self.doctor_email = doctor_email
        self.url = url
        self.room_code = room_code
        self.created_at = created_at or timezone.now()
        self.expires_at = self.created_at + ttl if ttl else None

    def is_expired(self, now=None):
        if self.expires_at is None:
            return False
        return self.expires_at < (now or timezone.now())

    def as_dict(self):
        return {
            'meeting_id': self.meeting_id,
            'consultation_id': self.consultation_id,
            'patient_email': self.patient_email,
            'doctor_email': self.doctor_email,
            'url': self.url,
            'room_code': self.room_code,
            'created_at': self.created_at.isoformat(),
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
        }

    def __repr__(self):
        return f"<MeetingDetails {self.consultation_id} {self.url}>"


class MeetingRoomCache:
    """
    Look-aside cache of meeting rooms keyed by (consultation id, patient email)

    Values are recomputable, so concurrent writers of the same key store the
    same room and last-write-wins is fine. The lock only protects the dict.
    """

    def __init__(self):
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, consultation_id, patient_email):
        with self._lock:
            return self._entries.get((consultation_id, patient_email))

    def set(self, details):
        with self._lock:
            self._entries[(details.consultation_id, details.patient_email)] = details
        return details

    def delete(self, consultation_id):
        """Drop every entry of a consultation; returns how many were removed"""
        with self._lock:
            keys = [key for key in self._entries if key[0] == consultation_id]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def cleanup_expired(self, now=None):
        now = now or timezone.now()
        with self._lock:
            expired = [key for key, details in self._entries.items() if details.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def values(self):
        with self._lock:
            return list(self._entries.values())

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


class MeetingService:
    """Resolves consultation meeting rooms for the patient and doctor views"""

    def __init__(self, cache=None, ttl_hours=None):
        self.cache = cache if cache is not None else MeetingRoomCache()
        if ttl_hours is None:
            ttl_hours = getattr(settings, 'MEETING_CACHE_TTL_HOURS', 24)
        self.ttl = timedelta(hours=ttl_hours) if ttl_hours else None

    def get_meeting(self, consultation_id, patient_email):
        """
        Get meeting details for a consultation, deriving them on a cache miss

        Args:
            consultation_id (str): Consultation identifier
            patient_email (str): Email of the patient who booked it

        Returns:
            MeetingDetails: The resolved meeting
        """
        consultation_id = str(consultation_id)
        details = self.cache.get(consultation_id, patient_email)
        if details is not None and not details.is_expired():
            return details

        details = self.cache.set(self._derive_details(consultation_id, patient_email))
        logger.info(f"Generated meeting URL for consultation {consultation_id}: {details.url}")
        return details

    def _derive_details(self, consultation_id, patient_email):
        room_code = derive_room_code(consultation_id, patient_email)
        return MeetingDetails(
            consultation_id=consultation_id,
            patient_email=patient_email,
            url=f"{MEET_BASE_URL}{room_code}",
            room_code=room_code,
            ttl=self.ttl,
        )

    def patient_meeting_url(self, consultation_id, patient_email):
        """Meeting URL shown on the patient's own consultation view"""
        return self.get_meeting(consultation_id, patient_email).url

    def doctor_meeting_url(self, consultation_id, patient_email):
        """Meeting URL shown in the doctor/admin dashboard"""
        return self.get_meeting(consultation_id, patient_email).url

    def add_doctor_to_meeting(self, consultation_id, patient_email, doctor_email):
        details = self.get_meeting(consultation_id, patient_email)
        details.doctor_email = doctor_email
        logger.info(f"Added doctor {doctor_email} to meeting for consultation {consultation_id}")
        return details

    def delete_meeting(self, consultation_id):
        removed = self.cache.delete(str(consultation_id))
        if removed:
            logger.info(f"Deleted meeting for consultation {consultation_id}")
        return removed > 0

    def cleanup_expired_meetings(self):
        removed = self.cache.cleanup_expired()
        if removed:
            logger.info(f"Cleaned up {removed} expired meetings")
        return removed

    def all_meetings(self):
        self.cleanup_expired_meetings()
        return self.cache.values()

    def rehydrate(self, consultations):
        """
        Warm the cache from consultation records that already carry a meeting link

        The cache only ever holds derived rooms. A stored link is compared
        with the derived URL and a mismatch, including a link from another
        provider, is logged as a divergence. Cancelled records are skipped.

        Args:
            consultations (iterable): Objects with `consultation_id`,
                `patient_email` and `meeting_link` attributes, and optionally
                `status`

        Returns:
            int: Number of records loaded into the cache
        """
        loaded = 0
        divergent = 0
        for consultation in consultations:
            consultation_id = str(consultation.consultation_id)
            patient_email = consultation.patient_email
            meeting_link = consultation.meeting_link
            if not meeting_link or getattr(consultation, 'status', None) == 'cancelled':
                continue
            if self.cache.get(consultation_id, patient_email) is not None:
                continue

            details = self._derive_details(consultation_id, patient_email)
            if meeting_link != details.url:
                divergent += 1
                logger.warning(
                    f"Stored meeting link for consultation {consultation_id} "
                    f"({extract_room_code(meeting_link) or meeting_link}) "
                    f"differs from derived room {details.room_code}"
                )

            self.cache.set(details)
            loaded += 1

        if loaded:
            logger.info(f"Rehydrated {loaded} meetings from consultations ({divergent} divergent)")
        return loaded

    def reset(self):
        self.cache.clear()


def get_meeting_service():
    """Return the process-wide MeetingService owned by the consultations app"""
    from django.apps import apps
    return apps.get_app_config('consultations').meeting_service
