class GridError(Exception):
    """Base class for structural errors raised by grid commands."""


class DuplicateKey(GridError):
    def __init__(self, key: str):
        super().__init__(f"Column key '{key}' already exists")
        self.key = key


class ProtectedColumn(GridError):
    def __init__(self, key: str):
        super().__init__(f"Column '{key}' is reserved")
        self.key = key


class OutOfRange(GridError):
    def __init__(self, index: int, size: int):
        super().__init__(f"Row {index} out of range (0..{size - 1})")
        self.index = index
        self.size = size


class UnknownColumn(GridError):
    def __init__(self, key: str):
        super().__init__(f"Unknown column '{key}'")
        self.key = key


class UnknownFormat(GridError):
    def __init__(self, fmt: str):
        super().__init__(f"Unknown format '{fmt}' (use text, number or currency)")
        self.fmt = fmt


class MalformedRow(GridError):
    # never escapes import_csv: short rows are counted and skipped
    def __init__(self, line_no: int, fields: int, expected: int):
        super().__init__(
            f"Row {line_no} has {fields} field{'s' if fields != 1 else ''}, expected {expected}"
        )
        self.line_no = line_no
        self.fields = fields
        self.expected = expected


class InvalidLabel(GridError):
    def __init__(self, label: str):
        super().__init__("Column name required")
        self.label = label


class MalformedCsv(GridError):
    def __init__(self, detail: str):
        super().__init__(f"Cannot parse CSV: {detail}")
        self.detail = detail
