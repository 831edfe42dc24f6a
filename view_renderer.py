from cell_coercion import display_value, stringify
from column_registry import SERIAL_KEY

MAX_COL_WIDTH = 40


def display_rows(state):
    """Displayed text for each visible cell of the current view."""
    view = state.view()
    formats = {col.key: col.format for col in state.registry}
    symbol = state.config.get("CURRENCY_SYMBOL", "$")
    rows = []
    for _, row in view.iterrows():
        cells = [stringify(row[SERIAL_KEY])]
        for key in view.columns[1:]:
            cells.append(display_value(row[key], formats[key], state.view_mode, symbol))
        rows.append(cells)
    return rows


def render_view(state, width=120):
    header = [""] + [state.registry.get(k).label for k in state.registry.visible_keys()]
    body = display_rows(state)
    widths = [len(h) for h in header]
    for cells in body:
        for idx, text in enumerate(cells):
            widths[idx] = max(widths[idx], len(text))
    widths = [min(MAX_COL_WIDTH, w) for w in widths]

    def fmt(cells):
        parts = [str(text)[:w].ljust(w) for text, w in zip(cells, widths)]
        return " | ".join(parts).rstrip()[:width]

    lines = [fmt(header), "-" * min(width, sum(widths) + 3 * (len(widths) - 1))]
    lines.extend(fmt(cells) for cells in body)
    return "\n".join(lines)


def render_status(context, width):
    """
    context keys: status_msg, active_tab, search_term, view_mode, view_rows,
                   total_rows, hidden
    """
    if context.get("status_msg"):
        text = f" {context['status_msg']}"
    else:
        tab = context.get("active_tab", "All")
        mode = "FORMULA" if context.get("view_mode") == "formula" else "NORMAL"
        search = context.get("search_term") or ""
        search_info = f' | search "{search}"' if search else ""
        hidden = context.get("hidden") or []
        hidden_info = f" | hidden {len(hidden)}" if hidden else ""
        rows = f"{context.get('view_rows', 0)}/{context.get('total_rows', 0)} rows"
        text = f" {mode} | {tab} | {rows}{search_info}{hidden_info}"

    return text.ljust(width)[:width]
