'''
ReportLine records and the decoder that builds them from Athena result rows.

A row arrives as {'Data': [{'VarCharValue': ...}, ...]} with the
column header (Label, Type, ...) supplied separately by the result set
metadata. Only varchar columns with a known label are accepted.
'''

from dataclasses import dataclass, asdict, fields


class ReportDataError(Exception):
    ''' Base class for every failure while building the gene report. '''


class SchemaError(ReportDataError):
    ''' A result column or row does not fit the ReportLine layout. '''


SUPPORTED_TYPE = 'varchar'

# athena column label -> ReportLine field
LABEL_TO_FIELD = {
    'gene': 'gene',
    'reference': 'reference_number',
    'riskallele': 'risk_allele',
    'maf': 'maf',
    'lifestylefactor': 'lifestyle_factor',
    'nutrienteffects': 'nutrient_effects',
    'geneeffects': 'gene_effects',
    'condition': 'condition_related',
}


@dataclass(frozen=True)
class ReportLine:
    gene: str
    reference_number: str
    risk_allele: str
    maf: str
    lifestyle_factor: str
    nutrient_effects: str
    gene_effects: str
    condition_related: str

    def __post_init__(self):
        invalid = [f.name for f in fields(self) if not isinstance(getattr(self, f.name), str)]
        if invalid:
            raise SchemaError(f'ReportLine fields must be strings: {", ".join(invalid)}')

    def to_dict(self):
        return asdict(self)


def cell_values(row):
    ''' Plain string values of a result row, None for SQL NULL. '''
    return [cell.get('VarCharValue') for cell in row.get('Data', [])]


def column_labels(column_info):
    return [column['Label'] for column in column_info]


def decode_row(row, column_info):
    '''
    Maps one result row onto a ReportLine.

    Raises SchemaError for a non-varchar column, an unknown label, or
    when any of the eight fields ends up without a value.
    '''
    values = cell_values(row)
    decoded = {}

    for i, column in enumerate(column_info):
        column_type = column.get('Type')
        label = column.get('Label')

        if column_type != SUPPORTED_TYPE:
            raise SchemaError(f'Unexpected type: {column_type} (column {label})')

        if label not in LABEL_TO_FIELD:
            raise SchemaError(f'Unexpected label: {label}')

        # short rows and NULL cells leave the field unset
        value = values[i] if i < len(values) else None
        if value is not None:
            decoded[LABEL_TO_FIELD[label]] = value

    missing = [f.name for f in fields(ReportLine) if f.name not in decoded]
    if missing:
        raise SchemaError(f'Row is missing values for: {", ".join(missing)}')

    return ReportLine(**decoded)


def decode_rows(rows, column_info):
    ''' Decodes every row in order, failing on the first bad one. '''
    return [decode_row(row, column_info) for row in rows]
