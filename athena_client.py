'''
Builds the boto3 Athena client used by the report Lambda.
'''

import os
import logging
from contextlib import contextmanager

import boto3
from botocore.config import Config

import athena_config

logger = logging.getLogger(__name__)


def create_client(region=None, connect_timeout=None, read_timeout=None):
    '''
    Returns an Athena client for the configured region.

    Credentials are taken from AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY
    when both are set, otherwise boto3 falls back to its default chain
    (the Lambda execution role).
    '''
    region = region or athena_config.region

    access_key = os.environ.get('AWS_ACCESS_KEY_ID')
    secret_key = os.environ.get('AWS_SECRET_ACCESS_KEY')

    if access_key and secret_key:
        session = boto3.session.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            aws_session_token=os.environ.get('AWS_SESSION_TOKEN'),
            region_name=region
        )
    else:
        session = boto3.session.Session(region_name=region)

    config = Config(
        connect_timeout=connect_timeout or athena_config.connect_timeout,
        read_timeout=read_timeout or athena_config.read_timeout
    )

    return session.client('athena', config=config)


@contextmanager
def athena_client(**kwargs):
    ''' Yields a fresh client and closes it however the block exits. '''
    client = create_client(**kwargs)
    logger.info(f'SUCCESS: Created Athena client for {client.meta.region_name}')
    try:
        yield client
    finally:
        client.close()
