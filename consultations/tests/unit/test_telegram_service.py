# consultations/tests/unit/test_telegram_service.py
import pytest
import requests
from unittest.mock import MagicMock, patch

from consultations.services.telegram_service import TelegramService


@pytest.fixture
def telegram_settings(settings):
    settings.TELEGRAM_BOT_TOKEN = 'bot-token'
    settings.DOCTOR_TELEGRAM_CHAT_ID = '12345'
    settings.TELEGRAM_API_URL = 'https://api.telegram.org'
    return settings


@patch('consultations.services.telegram_service.requests.post')
def test_unconfigured_bot_skips_request(mock_post, settings):
    settings.TELEGRAM_BOT_TOKEN = ''
    settings.DOCTOR_TELEGRAM_CHAT_ID = ''

    service = TelegramService()
    assert service.is_configured is False
    assert service.send_message('hello') is False
    mock_post.assert_not_called()


@patch('consultations.services.telegram_service.requests.post')
def test_send_message_posts_html(mock_post, telegram_settings):
    mock_post.return_value = MagicMock(status_code=200)

    assert TelegramService().send_message('<b>hi</b>') is True

    mock_post.assert_called_once_with(
        'https://api.telegram.org/botbot-token/sendMessage',
        json={'chat_id': '12345', 'text': '<b>hi</b>', 'parse_mode': 'HTML'},
        timeout=10
    )


@patch('consultations.services.telegram_service.requests.post')
def test_rejected_message_returns_false(mock_post, telegram_settings):
    mock_post.return_value = MagicMock(status_code=400, text='Bad Request: chat not found')
    assert TelegramService().send_message('hi') is False


@patch('consultations.services.telegram_service.requests.post',
       side_effect=requests.ConnectionError('offline'))
def test_network_error_returns_false(mock_post, telegram_settings):
    assert TelegramService().send_message('hi') is False


@pytest.mark.django_db
@patch('consultations.services.telegram_service.requests.post')
def test_new_consultation_message(mock_post, telegram_settings, consultation):
    mock_post.return_value = MagicMock(status_code=200)
    url = 'https://meet.google.com/abc-defg-hij'

    assert TelegramService().notify_new_consultation(consultation, url) is True

    text = mock_post.call_args.kwargs['json']['text']
    assert 'NEW CONSULTATION BOOKED' in text
    assert 'Sarah Johnson' in text
    assert 'Initial Consultation' in text
    assert url in text


@pytest.mark.django_db
@patch('consultations.services.telegram_service.requests.post')
def test_patient_details_are_html_escaped(mock_post, telegram_settings, consultation):
    mock_post.return_value = MagicMock(status_code=200)
    consultation.patient_name = 'Tom & Jerry <Sr>'

    TelegramService().notify_new_consultation(consultation, 'https://meet.google.com/abc-defg-hij')
    TelegramService().notify_reminder(consultation, 'https://meet.google.com/abc-defg-hij')

    assert mock_post.call_count == 2
    for call in mock_post.call_args_list:
        text = call.kwargs['json']['text']
        assert 'Tom &amp; Jerry &lt;Sr&gt;' in text
        assert 'Tom & Jerry' not in text
