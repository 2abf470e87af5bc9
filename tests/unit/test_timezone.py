"""
Unit tests for the application timezone policy.
"""
import pytest
from datetime import datetime, timezone

import pytz

from services import timezone_service


class TestTimezoneService:

    def test_convert_to_local_time(self):
        utc_time = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        local_time, local_date, _ = timezone_service.convert_utc_to_user_time('America/New_York', utc_time)
        assert local_time.hour == 7
        assert local_date.day == 1

    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 6, 14, 20, 0)
        assert timezone_service.to_local_date(naive, 'UTC').day == 14
        assert timezone_service.to_local_date(naive, 'Asia/Kolkata').day == 15

    def test_invalid_zone_falls_back_to_utc(self):
        assert timezone_service.get_timezone_object('Mars/Olympus') is pytz.UTC

    @pytest.mark.parametrize('name,valid', [('UTC', True), ('Asia/Kolkata', True), ('Nowhere/Special', False)])
    def test_validate_timezone(self, name, valid):
        assert timezone_service.validate_timezone(name) is valid

    def test_app_timezone_outside_app_context(self):
        assert timezone_service.app_timezone() == 'UTC'

    def test_app_timezone_from_config(self, app):
        app.config['APP_TIMEZONE'] = 'Asia/Kolkata'
        assert timezone_service.app_timezone() == 'Asia/Kolkata'
