"""
Internal field type tags.

These are the values stored in FieldDefinition.type and returned by
Record.get_field_type(). Stores and the codec dispatch on them.
"""

STRING = 'string'
INTEGER = 'integer'
DECIMAL = 'decimal'
BOOLEAN = 'boolean'
DATE = 'glide_date'
DATE_TIME = 'glide_date_time'
JSON = 'json'
GUID = 'guid'

# Two-way encrypted text; plaintext is only available via get_decrypted_value
PASSWORD2 = 'password2'

# Append-only journal; setting a value adds an entry
JOURNAL_INPUT = 'journal_input'

# Key into another table
REFERENCE = 'reference'

FIELD_TYPES = frozenset({
    STRING,
    INTEGER,
    DECIMAL,
    BOOLEAN,
    DATE,
    DATE_TIME,
    JSON,
    GUID,
    PASSWORD2,
    JOURNAL_INPUT,
    REFERENCE,
})

# Types rendered as plain text without conversion
TEXT_TYPES = frozenset({STRING, GUID})

DEFAULT_PRIMARY_KEY = 'sys_id'
