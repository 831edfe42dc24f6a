from cell_coercion import CURRENCY, TEXT
from column_registry import ColumnDef, ColumnRegistry
from grid_state import GridState

DEFAULT_COLUMNS = [
    ColumnDef("Job Request", "job", TEXT),
    ColumnDef("Submitted", "submitted", TEXT),
    ColumnDef("Status", "status", TEXT),
    ColumnDef("Submitter", "submitter", TEXT),
    ColumnDef("URL", "url", TEXT),
    ColumnDef("Assigned", "assigned", TEXT),
    ColumnDef("Priority", "priority", TEXT),
    ColumnDef("Due Date", "due", TEXT),
    ColumnDef("Est. Value", "value", CURRENCY),
]


class DefaultGridInitializer:
    def create(self, rows=None, config=None) -> GridState:
        registry = ColumnRegistry(DEFAULT_COLUMNS)
        return GridState(registry, rows=rows, config=config)
