'''
Processor for /report API endpoint

Runs the SNP report query on Athena and returns the matching lines.
The request itself is only a trigger, nothing in it is read.

Sample API call:
https://<api-id>.execute-api.eu-west-2.amazonaws.com/prod/report
'''

import json
import logging

from botocore.exceptions import BotoCoreError, ClientError

import athena_config
from athena_client import athena_client
from athena_query import submit_query, wait_for_query, fetch_report_lines
from report_line import ReportDataError

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def build_response(report_lines):
    ''' Wraps the report lines in an API Gateway proxy response. '''
    body = [line.to_dict() for line in report_lines]

    # construct http response object
    response_object = {
        'headers': {'Content-Type': 'application/json'},
        'statusCode': 200,
        'body': json.dumps(body, indent=2)
    }

    return response_object


def lambda_handler(event, context):
    try:
        with athena_client() as client:
            execution_id = submit_query(
                client,
                athena_config.report_query,
                athena_config.database_name,
                athena_config.output_location
            )

            wait_for_query(
                client,
                execution_id,
                poll_interval=athena_config.poll_interval,
                timeout=athena_config.poll_timeout,
                backoff=athena_config.poll_backoff,
                max_interval=athena_config.poll_max_interval
            )

            report_lines = fetch_report_lines(
                client, execution_id, page_size=athena_config.page_size
            )
    except (ReportDataError, BotoCoreError, ClientError) as e:
        # let the runtime fail the invocation, API Gateway answers 5xx
        logger.error(f'ERROR: Could not build report: {e}')
        raise

    logger.info(f'SUCCESS: Returning {len(report_lines)} report lines')

    return build_response(report_lines)
