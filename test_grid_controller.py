import csv
import unittest

from default_grid_initializer import DefaultGridInitializer
from grid_controller import GridController
from grid_errors import DuplicateKey, MalformedCsv, OutOfRange, ProtectedColumn, UnknownColumn
from selection import IDLE, KEY_TAB, RANGE_SELECTED, CellRef


def _controller(rows=None):
    state = DefaultGridInitializer().create(rows=rows)
    messages = []
    return GridController(state, lambda m, _: messages.append(m)), messages


STATUS_ROWS = [
    {"job": "first", "status": "need to start"},
    {"job": "second", "status": "in-process"},
    {"job": "third", "status": "complete"},
]


class ControllerRowTests(unittest.TestCase):
    def test_add_and_delete_keep_serials_contiguous(self):
        ctl, messages = _controller()
        for _ in range(4):
            ctl.add_row()
        ctl.delete_row(1)
        ctl.add_row()
        ctl.delete_row(0)
        self.assertEqual(ctl.store.serials(), [1, 2, 3])
        self.assertEqual(list(ctl.view()["serial"]), [1, 2, 3])
        self.assertIn("Added row", messages)

    def test_new_row_defaults_follow_formats(self):
        ctl, _ = _controller()
        ctl.add_row()
        record = ctl.view_records()[0]
        self.assertEqual(record["job"], "")
        self.assertEqual(record["value"], 0)

    def test_delete_row_out_of_range_leaves_grid_usable(self):
        ctl, messages = _controller(STATUS_ROWS)
        with self.assertRaises(OutOfRange):
            ctl.delete_row(3)
        self.assertTrue(messages[-1].startswith("Row 3 out of range"))
        ctl.delete_row(2)
        self.assertEqual(len(ctl.store), 2)

    def test_delete_row_addresses_the_view(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.set_active_tab("Arrived")
        removed = ctl.delete_row(0)
        self.assertEqual(removed["job"], "third")
        ctl.set_active_tab("All")
        self.assertEqual([r["job"] for r in ctl.view_records()], ["first", "second"])

    def test_edit_currency_with_text_stores_zero(self):
        ctl, _ = _controller([{"job": "a", "value": 99}])
        self.assertEqual(ctl.edit_cell(0, "value", "abc"), 0)
        self.assertEqual(ctl.view_records()[0]["value"], 0)

    def test_edit_errors(self):
        ctl, _ = _controller([{"job": "a"}])
        with self.assertRaises(UnknownColumn):
            ctl.edit_cell(0, "nope", "x")
        with self.assertRaises(ProtectedColumn):
            ctl.edit_cell(0, "serial", "5")
        with self.assertRaises(OutOfRange):
            ctl.edit_cell(1, "job", "x")

    def test_formula_mode_edit_drops_leading_equals(self):
        ctl, _ = _controller([{"job": "a"}])
        self.assertEqual(ctl.toggle_cell_view_mode(), "formula")
        ctl.edit_cell(0, "job", "=hello")
        ctl.edit_cell(0, "value", "=12")
        record = ctl.view_records()[0]
        self.assertEqual(record["job"], "hello")
        self.assertEqual(record["value"], 12)
        self.assertEqual(ctl.toggle_cell_view_mode(), "normal")


class ControllerColumnTests(unittest.TestCase):
    def test_add_column_backfills_existing_rows(self):
        ctl, _ = _controller(STATUS_ROWS)
        self.assertEqual(ctl.add_column("Due Soon"), "due_soon")
        for record in ctl.store.records():
            self.assertEqual(record["due_soon"], "")

    def test_add_duplicate_column_rejected(self):
        ctl, _ = _controller()
        ctl.add_column("Notes")
        with self.assertRaises(DuplicateKey):
            ctl.add_column("NOTES")
        self.assertEqual(ctl.registry.keys().count("notes"), 1)

    def test_delete_column_strips_key_and_prunes_hidden(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.set_hidden_columns(["priority", "url"])
        ctl.delete_column("priority")
        self.assertEqual(ctl.registry.hidden, frozenset({"url"}))
        for record in ctl.store.records():
            self.assertNotIn("priority", record)

    def test_serial_column_is_protected(self):
        ctl, _ = _controller()
        with self.assertRaises(ProtectedColumn):
            ctl.delete_column("serial")
        with self.assertRaises(ProtectedColumn):
            ctl.set_hidden_columns(["serial"])

    def test_hidden_columns_leave_view_but_not_data(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.set_hidden_columns(["status"])
        self.assertNotIn("status", ctl.view().columns)
        self.assertEqual(ctl.store.value(0, "status"), "need to start")

    def test_set_format_does_not_recoerce_until_next_write(self):
        ctl, _ = _controller([{"job": "12"}])
        ctl.set_column_format("job", "number")
        self.assertEqual(ctl.store.value(0, "job"), "12")
        ctl.edit_cell(0, "job", "13")
        self.assertEqual(ctl.store.value(0, "job"), 13)


class ControllerViewTests(unittest.TestCase):
    def test_tab_scenarios(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.set_active_tab("Pending")
        self.assertEqual([r["job"] for r in ctl.view_records()], ["first"])
        ctl.set_active_tab("Reviewed")
        self.assertEqual([r["job"] for r in ctl.view_records()], ["second"])
        ctl.set_active_tab("Unknown")
        self.assertEqual(ctl.view_records(), [])

    def test_search_combines_with_tab(self):
        ctl, _ = _controller(STATUS_ROWS + [{"job": "fourth", "status": "complete"}])
        ctl.set_active_tab("Arrived")
        ctl.set_search_term("FOURTH")
        self.assertEqual([r["job"] for r in ctl.view_records()], ["fourth"])

    def test_sort_commits_order_and_survives_filter(self):
        ctl, _ = _controller([{"value": 30}, {"value": 10}, {"value": 20}])
        ctl.sort("value", "asc")
        self.assertEqual([r["value"] for r in ctl.store.records()], [10, 20, 30])
        self.assertEqual(ctl.store.serials(), [1, 2, 3])
        view = ctl.filter("value", "")
        self.assertEqual(list(view["value"]), [10, 20, 30])

    def test_filter_is_view_only_and_recomputed(self):
        ctl, _ = _controller(STATUS_ROWS)
        first = ctl.filter("job", "IR")
        self.assertEqual(list(first["job"]), ["first", "third"])
        again = ctl.filter("job", "IR")
        self.assertEqual(list(again.index), list(first.index))
        self.assertEqual(len(ctl.store), 3)
        ctl.clear_filter()
        self.assertEqual(len(ctl.view()), 3)

    def test_deleting_filtered_column_drops_filter(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.filter("priority", "high")
        self.assertEqual(len(ctl.view()), 0)
        ctl.delete_column("priority")
        self.assertEqual(len(ctl.view()), 3)

    def test_sort_bad_direction_reports_status(self):
        ctl, messages = _controller(STATUS_ROWS)
        with self.assertRaises(ValueError):
            ctl.sort("job", "sideways")
        self.assertTrue(messages[-1].startswith("Unknown sort direction"))
        self.assertEqual([r["job"] for r in ctl.store.records()], ["first", "second", "third"])

    def test_sort_after_format_change_compares_numerically(self):
        ctl, _ = _controller([{"job": "5"}, {"job": ""}, {"job": "3"}])
        ctl.set_column_format("job", "number")
        ctl.edit_cell(0, "job", "5")
        ctl.edit_cell(2, "job", "3")
        ctl.sort("job", "asc")
        self.assertEqual([r["job"] for r in ctl.store.records()], ["", 3, 5])

    def test_sort_unknown_column(self):
        ctl, _ = _controller(STATUS_ROWS)
        with self.assertRaises(UnknownColumn):
            ctl.sort("nope", "asc")

    def test_share_url(self):
        ctl, _ = _controller()
        ctl.set_active_tab("Pending")
        self.assertEqual(ctl.share_url("https://example.com/"), "https://example.com/table?tab=Pending")


class ControllerSelectionTests(unittest.TestCase):
    def test_shift_click_range_scenario(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.click_cell(0, "job")
        self.assertEqual(ctl.click_cell(2, "status", shift=True), RANGE_SELECTED)
        expected = {
            CellRef(r, k) for r in range(3) for k in ("job", "submitted", "status")
        }
        self.assertEqual(set(ctl.selected_cells()), expected)

    def test_hiding_a_column_narrows_range(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.click_cell(0, "job")
        ctl.click_cell(2, "status", shift=True)
        ctl.set_hidden_columns(["submitted"])
        self.assertEqual(len(ctl.selected_cells()), 6)

    def test_deleting_focused_column_moves_focus(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.click_cell(1, "status")
        ctl.delete_column("status")
        self.assertEqual(ctl.selection.focused, CellRef(1, "submitter"))

    def test_deleting_last_row_goes_idle(self):
        ctl, _ = _controller([{"job": "only"}])
        ctl.click_cell(0, "job")
        ctl.delete_row(0)
        self.assertEqual(ctl.selection.state, IDLE)

    def test_tab_navigation_skips_hidden_columns(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.set_hidden_columns(["submitted"])
        ctl.click_cell(0, "job")
        self.assertTrue(ctl.handle_key(KEY_TAB))
        self.assertEqual(ctl.selection.focused, CellRef(0, "status"))

    def test_view_filter_clamps_focus(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.click_cell(2, "job")
        ctl.set_active_tab("Pending")
        self.assertEqual(ctl.selection.focused, CellRef(0, "job"))


class ControllerCsvTests(unittest.TestCase):
    def test_export_then_import_round_trip(self):
        ctl, _ = _controller(
            [
                {"job": "Launch, phase 1", "status": "complete", "value": "42"},
                {"job": "Audit", "status": "need to start", "value": 7.5},
            ]
        )
        ctl.set_hidden_columns(["url"])
        text = ctl.export_csv()
        lines = text.splitlines()
        self.assertTrue(lines[0].startswith("Job Request,Submitted,Status"))
        self.assertIn("URL", lines[0])
        self.assertTrue(lines[1].endswith(",42"))

        other, _ = _controller()
        result = other.import_csv(text.encode("utf-8"))
        self.assertEqual(len(result.rows), 2)
        originals = ctl.store.records()
        for got, want in zip(other.store.records(), originals):
            self.assertEqual(got, want)

    def test_import_appends_and_renumbers(self):
        ctl, messages = _controller([{"job": "existing"}])
        header = ",".join(ctl.registry.labels())
        body = "a,b,c,d,e,f,g,h,5\nshort,row\n\nx,,,,,,,,bad\n"
        result = ctl.import_csv(f"{header}\n{body}".encode("utf-8"))
        self.assertEqual(result.skipped, 1)
        self.assertEqual(ctl.store.serials(), [1, 2, 3])
        self.assertEqual([r["value"] for r in ctl.store.records()], [0, 5, 0])
        self.assertEqual(messages[-1], "Imported 2 rows (1 skipped)")

    def test_long_cell_survives_round_trip(self):
        long_text = "x" * 200_000
        ctl, _ = _controller([{"job": long_text, "status": "complete"}])
        other, _ = _controller()
        other.import_csv(ctl.export_csv().encode("utf-8"))
        self.assertEqual(other.store.records()[0]["job"], long_text)

    def test_unparseable_csv_reports_status(self):
        ctl, messages = _controller([{"job": "existing"}])
        previous = csv.field_size_limit(8)
        try:
            with self.assertRaises(MalformedCsv):
                ctl.import_csv(b"h1,h2\nmuch-too-long-field,b\n")
        finally:
            csv.field_size_limit(previous)
        self.assertTrue(messages[-1].startswith("Cannot parse CSV"))
        self.assertEqual(ctl.store.serials(), [1])

    def test_export_follows_current_view(self):
        ctl, _ = _controller(STATUS_ROWS)
        ctl.set_active_tab("Reviewed")
        lines = ctl.export_csv().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[1].startswith("second,"))


if __name__ == "__main__":
    unittest.main()
