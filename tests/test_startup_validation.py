"""
Tests for startup validation.

Tests cover:
- Missing credentials and targets are errors
- Suspicious values are warnings
- Service account file checks
- Secrets Manager connectivity (moto)
"""

import json

import boto3
import pytest
from moto import mock_aws

from currencytracker.errors import ConfigurationError
from currencytracker.startup_validation import StartupValidator, validate_startup


@pytest.fixture
def valid_settings(settings, service_account_file):
    return settings.model_copy(update={'GOOGLE_SERVICE_ACCOUNT_FILE': service_account_file})


class TestStartupValidator:

    def test_valid_configuration(self, valid_settings):
        success, errors, warnings = StartupValidator(valid_settings).validate_all()

        assert success
        assert errors == []
        assert warnings == []

    def test_missing_api_keys(self, valid_settings):
        settings = valid_settings.model_copy(update={'CMC_PRO_API_KEY': '', 'EOD_TOKEN': ''})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert not success
        assert any('CMC_PRO_API_KEY' in e for e in errors)
        assert any('EOD_TOKEN' in e for e in errors)

    def test_missing_targets(self, valid_settings):
        settings = valid_settings.model_copy(update={'SHEET_ID': '', 'CRYPTO_SYMBOLS': '', 'ETF_TICKER': ''})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert not success
        assert len(errors) == 3

    def test_suspicious_values_are_warnings(self, valid_settings):
        settings = valid_settings.model_copy(update={
            'SHEET_ID': 'your_sheet_id',
            'CRYPTO_SYMBOLS': 'BTC,NOT-A-TICKER',
        })

        success, errors, warnings = StartupValidator(settings).validate_all()

        assert success
        assert errors == []
        assert any('SHEET_ID' in w for w in warnings)
        assert any('NOT-A-TICKER' in w for w in warnings)

    def test_missing_service_account_file(self, settings, tmp_path):
        settings = settings.model_copy(update={'GOOGLE_SERVICE_ACCOUNT_FILE': str(tmp_path / 'missing.json')})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert not success
        assert 'not found' in errors[0]

    def test_service_account_file_not_json(self, settings, tmp_path):
        path = tmp_path / 'secret.json'
        path.write_text('not json')
        settings = settings.model_copy(update={'GOOGLE_SERVICE_ACCOUNT_FILE': str(path)})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert not success
        assert 'not readable JSON' in errors[0]

    def test_service_account_missing_fields(self, settings, tmp_path):
        path = tmp_path / 'secret.json'
        path.write_text(json.dumps({'type': 'service_account', 'project_id': 'tracker-test'}))
        settings = settings.model_copy(update={'GOOGLE_SERVICE_ACCOUNT_FILE': str(path)})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert not success
        assert 'private_key' in errors[0]
        assert 'client_email' in errors[0]

    def test_wrong_credential_type_is_warning(self, settings, tmp_path, service_account_info):
        service_account_info['type'] = 'authorized_user'
        path = tmp_path / 'secret.json'
        path.write_text(json.dumps(service_account_info))
        settings = settings.model_copy(update={'GOOGLE_SERVICE_ACCOUNT_FILE': str(path)})

        success, _, warnings = StartupValidator(settings).validate_all()

        assert success
        assert "'authorized_user'" in warnings[0]


class TestSecretConnectivity:

    @mock_aws
    def test_secret_with_service_account(self, settings, aws_credentials, service_account_info):
        client = boto3.client('secretsmanager', region_name='us-west-2')
        client.create_secret(Name='test/sheets-writer', SecretString=json.dumps(service_account_info))
        settings = settings.model_copy(update={'SHEETS_SECRET_NAME': 'test/sheets-writer'})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert success, errors

    @mock_aws
    def test_missing_secret(self, settings, aws_credentials):
        settings = settings.model_copy(update={'SHEETS_SECRET_NAME': 'test/missing'})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert not success
        assert "Secret 'test/missing' not found" in errors[0]

    @mock_aws
    def test_secret_not_json(self, settings, aws_credentials):
        client = boto3.client('secretsmanager', region_name='us-west-2')
        client.create_secret(Name='test/sheets-writer', SecretString='plain text')
        settings = settings.model_copy(update={'SHEETS_SECRET_NAME': 'test/sheets-writer'})

        success, errors, _ = StartupValidator(settings).validate_all()

        assert not success
        assert 'valid JSON' in errors[0]

    def test_skip_connectivity(self, settings):
        settings = settings.model_copy(update={'SHEETS_SECRET_NAME': 'test/sheets-writer'})

        success, errors, _ = StartupValidator(settings, skip_connectivity=True).validate_all()

        assert success, errors


class TestValidateStartup:

    def test_returns_warnings(self, valid_settings):
        settings = valid_settings.model_copy(update={'SHEET_ID': 'short'})

        warnings = validate_startup(settings)

        assert len(warnings) == 1

    def test_raises_on_errors(self, valid_settings):
        settings = valid_settings.model_copy(update={'EOD_TOKEN': ''})

        with pytest.raises(ConfigurationError) as exc_info:
            validate_startup(settings)

        assert 'EOD_TOKEN' in str(exc_info.value)
