from unittest.mock import MagicMock, patch

import pytest

import athena_client
from athena_client import create_client


def test_create_client_uses_configured_region(monkeypatch):
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setattr(athena_client.athena_config, 'region', 'eu-west-2')

    client = create_client()

    assert client.meta.service_model.service_name == 'athena'
    assert client.meta.region_name == 'eu-west-2'
    assert client.meta.config.connect_timeout == athena_client.athena_config.connect_timeout
    client.close()


def test_create_client_passes_timeouts(monkeypatch):
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')

    client = create_client(region='us-east-1', connect_timeout=5, read_timeout=30)

    assert client.meta.region_name == 'us-east-1'
    assert client.meta.config.connect_timeout == 5
    assert client.meta.config.read_timeout == 30
    client.close()


def test_create_client_reads_environment_credentials(monkeypatch):
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'AKIDEXAMPLE')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'secret')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'token')

    with patch('athena_client.boto3.session.Session') as session:
        create_client(region='eu-west-2')

    session.assert_called_once_with(
        aws_access_key_id='AKIDEXAMPLE',
        aws_secret_access_key='secret',
        aws_session_token='token',
        region_name='eu-west-2'
    )


def test_create_client_falls_back_to_default_chain(monkeypatch):
    monkeypatch.delenv('AWS_ACCESS_KEY_ID', raising=False)
    monkeypatch.delenv('AWS_SECRET_ACCESS_KEY', raising=False)

    with patch('athena_client.boto3.session.Session') as session:
        create_client(region='eu-west-2')

    session.assert_called_once_with(region_name='eu-west-2')


def test_athena_client_closes_on_error(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(athena_client, 'create_client', lambda **kwargs: client)

    with pytest.raises(RuntimeError):
        with athena_client.athena_client() as athena:
            assert athena is client
            raise RuntimeError('boom')

    client.close.assert_called_once_with()


def test_athena_client_closes_on_success(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(athena_client, 'create_client', lambda **kwargs: client)

    with athena_client.athena_client():
        pass

    client.close.assert_called_once_with()
