'''
Runs a query on Athena and reads its results back as ReportLines.

Athena is asynchronous: a query is submitted, its execution id is polled
until the query reaches a terminal state, and only then can the result
pages be fetched.
'''

import time
import logging

from botocore.exceptions import BotoCoreError, ClientError

from report_line import (
    ReportDataError, SchemaError, cell_values, column_labels, decode_rows
)

logger = logging.getLogger(__name__)


class SubmissionError(ReportDataError):
    ''' StartQueryExecution could not be issued. '''


class QueryFailedError(ReportDataError):

    def __init__(self, execution_id, reason):
        self.execution_id = execution_id
        self.reason = reason
        super().__init__(f'Query {execution_id} failed to run with error message: {reason}')


class QueryCancelledError(ReportDataError):

    def __init__(self, execution_id):
        self.execution_id = execution_id
        super().__init__(f'Query {execution_id} was cancelled.')


class QueryTimeoutError(ReportDataError):

    def __init__(self, execution_id, timeout):
        self.execution_id = execution_id
        self.timeout = timeout
        super().__init__(f'Query {execution_id} did not finish within {timeout} seconds.')


def submit_query(client, query, database, output_location):
    ''' Starts the query and returns the execution id Athena assigned to it. '''
    try:
        response = client.start_query_execution(
            QueryString=query,
            QueryExecutionContext={'Database': database},
            ResultConfiguration={'OutputLocation': output_location}
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f'ERROR: Could not submit query to Athena:\n{query}\n')
        raise SubmissionError(f'Could not submit query: {e}') from e

    execution_id = response['QueryExecutionId']
    logger.info(f'SUCCESS: Submitted query {execution_id}')

    return execution_id


def wait_for_query(client, execution_id, poll_interval=1, timeout=None,
                   backoff=1, max_interval=10):
    '''
    Polls Athena until the query succeeds, fails or is cancelled.

    Sleeps poll_interval seconds between checks, multiplied by backoff
    after each check up to max_interval. With a timeout the query is
    stopped and QueryTimeoutError raised once the deadline passes; the
    last sleep is cut short so the deadline is not overshot.

    Returns the final Status mapping of a successful query.
    '''
    if poll_interval <= 0:
        raise ValueError(f'poll_interval must be positive, got {poll_interval}')
    if backoff < 1:
        raise ValueError(f'backoff must be at least 1, got {backoff}')

    started = time.monotonic()
    interval = poll_interval
    max_interval = max(max_interval, poll_interval)

    while True:
        response = client.get_query_execution(QueryExecutionId=execution_id)
        status = response['QueryExecution']['Status']
        state = status['State']

        logger.info(f'Current status is: {state}')

        if state == 'SUCCEEDED':
            return status
        if state == 'FAILED':
            raise QueryFailedError(execution_id, status.get('StateChangeReason', 'Unknown error'))
        if state == 'CANCELLED':
            raise QueryCancelledError(execution_id)

        if timeout is None:
            time.sleep(interval)
        else:
            remaining = timeout - (time.monotonic() - started)
            if remaining <= 0:
                _stop_query(client, execution_id)
                raise QueryTimeoutError(execution_id, timeout)
            time.sleep(min(interval, remaining))

        interval = min(interval * backoff, max_interval)


def _stop_query(client, execution_id):
    # a failed stop is logged, the caller still reports the timeout
    try:
        client.stop_query_execution(QueryExecutionId=execution_id)
        logger.info(f'Stopped query {execution_id}')
    except (BotoCoreError, ClientError) as e:
        logger.error(f'ERROR: Could not stop query {execution_id}: {e}')


def iter_result_pages(client, execution_id, page_size=None):
    '''
    Yields (column_info, rows) for each page of a finished query,
    following NextToken until Athena stops returning one.
    '''
    request = {'QueryExecutionId': execution_id}
    if page_size:
        request['MaxResults'] = page_size

    column_info = None

    while True:
        response = client.get_query_results(**request)
        result_set = response['ResultSet']

        # later pages may come back without metadata, keep the first one
        page_columns = result_set.get('ResultSetMetadata', {}).get('ColumnInfo')
        if page_columns:
            column_info = page_columns
        if column_info is None:
            raise SchemaError(f'Query {execution_id} returned no column metadata')

        yield column_info, result_set.get('Rows', [])

        next_token = response.get('NextToken')
        if not next_token:
            break
        request['NextToken'] = next_token


def fetch_report_lines(client, execution_id, page_size=None, skip_header=True):
    '''
    Reads every result page and decodes the rows into ReportLines,
    keeping the order Athena returned them in.

    Athena repeats the column labels as the first row of the first page
    of a SELECT result. With skip_header that row is dropped, but only
    when its values really are the labels.
    '''
    report_lines = []

    for page_number, (column_info, rows) in enumerate(
        iter_result_pages(client, execution_id, page_size)
    ):
        if page_number == 0 and skip_header and rows \
                and cell_values(rows[0]) == column_labels(column_info):
            rows = rows[1:]

        report_lines.extend(decode_rows(rows, column_info))

    logger.info(f'SUCCESS: Decoded {len(report_lines)} report lines from query {execution_id}')

    return report_lines
