"""
Pytest configuration file for the AyurCare test suite.

This file defines shared fixtures used across the test files. It includes logic to:
- Build an isolated `RecordService` backed by a temporary data file and a freshly
  generated Fernet key, so tests never touch production records or keys.
- Provide an `AppConfig` whose mock backend does not wait.
- Provide a fake HTTP client that records every request and replays canned responses,
  so provider tests never reach the network.
"""
import pytest
from cryptography.fernet import Fernet

from ayurcare.config import AppConfig
from ayurcare.models import Address, EmergencyContact, PatientRecord
from ayurcare.records import RecordService


class FakeResponse:
    """Minimal stand-in for `requests.Response`."""

    def __init__(self, payload=None, status_code=200, reason="OK"):
        self._payload = payload
        self.status_code = status_code
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeHttp:
    """Records POST calls and returns the queued response (or raises it)."""

    def __init__(self, response=None):
        self.response = response if response is not None else FakeResponse({})
        self.calls = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def encryptor():
    """Provides a Fernet encryptor with a throwaway key."""
    return Fernet(Fernet.generate_key())


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "records.json"


@pytest.fixture
def service(data_file, encryptor):
    """Provides a fresh `RecordService` over an empty temporary store."""
    return RecordService(data_file=str(data_file), encryptor=encryptor)


@pytest.fixture
def config():
    """Provides a mock-backend configuration with no simulated delay."""
    return AppConfig(ai_service="mock", mock_delay_seconds=0, request_timeout_seconds=5)


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def patient():
    """Provides a fully populated patient that has not been stored yet."""
    return PatientRecord(
        name="Jane Doe",
        dob="1985-03-20",
        gender="female",
        marital_status="married",
        mobile="+91 98765 43210",
        email="jane@example.com",
        address=Address(street="12 Elm", city="Pune", state="Maharashtra", postal_code="411001", country="India"),
        uhid="UH-1001",
        aadhaar_number="1234-5678-9012",
        abha_id="ABHA-77",
        occupation="Teacher",
        occupation_type="sedentary",
        insurance_status=True,
        insurance_provider="Star Health",
        emergency_contact=EmergencyContact(name="John Doe", relationship="Spouse", phone="+91 91234 56789"),
        family_history=["Diabetes", "Hypertension"],
    )


@pytest.fixture
def stored_patient(service, patient):
    """Provides the sample patient after it has been saved through the service."""
    return service.create_patient(patient)
