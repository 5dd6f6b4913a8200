'''
Settings for the Athena report Lambda.

Every value can be overridden with an environment variable on the
Lambda function, otherwise the defaults below are used. An empty
variable counts as unset.
'''

import os


def _env(name, cast=str, default=None):
    value = os.environ.get(name)
    return cast(value) if value else default


region = _env('ATHENA_REGION', default='eu-west-2')

database_name = _env('ATHENA_DATABASE', default='23andme_data')

# athena writes result files here before they can be paged through
output_location = _env(
    'ATHENA_OUTPUT_LOCATION', default='s3://athena-output-bucket-from-lambda'
)

report_query = _env(
    'ATHENA_REPORT_QUERY',
    default='SELECT * FROM "23andme_data"."snplistbucket" '
    'WHERE reference IN (SELECT rsid FROM report_23andme_trimmed) '
    'AND riskallele IN (SELECT genotype FROM report_23andme_trimmed);'
)

# seconds between status checks
poll_interval = _env('ATHENA_POLL_INTERVAL', float, 1.0)
poll_backoff = _env('ATHENA_POLL_BACKOFF', float, 1.0)
poll_max_interval = _env('ATHENA_POLL_MAX_INTERVAL', float, 10.0)

# unset means poll until athena reports a terminal state
poll_timeout = _env('ATHENA_POLL_TIMEOUT', float)

# unset lets athena pick the page size (1000 rows max)
page_size = _env('ATHENA_PAGE_SIZE', int)

connect_timeout = _env('ATHENA_CONNECT_TIMEOUT', float, 60.0)
read_timeout = _env('ATHENA_READ_TIMEOUT', float, 60.0)
