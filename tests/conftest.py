import boto3
import pytest
from botocore.stub import Stubber

import athena_query


class FakeClock:
    ''' Stands in for the time module inside athena_query. '''

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def client():
    athena = boto3.client(
        'athena',
        region_name='eu-west-2',
        aws_access_key_id='testing',
        aws_secret_access_key='testing'
    )
    yield athena
    athena.close()


@pytest.fixture
def stubber(client):
    with Stubber(client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(athena_query, 'time', fake)
    return fake
