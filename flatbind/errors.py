class SchemaLoadError(ValueError):
    """The schema document could not be read or does not match schema.json."""


class SchemaConsistencyError(ValueError):
    """The schema refers to something the model cannot resolve."""


class UnrepresentableTypeError(ValueError):
    """A field type has no conversion path between the wire and native forms."""

    def __init__(self, record: str, field: str, reason: str):
        self.record = record
        self.field = field
        self.reason = reason
        super().__init__(f"{record}.{field}: {reason}")
