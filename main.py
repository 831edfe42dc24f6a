import csv
import logging
import shutil
import sys
from importlib.metadata import PackageNotFoundError, version

import config_paths
from csv_file_handler import CsvFileHandler
from default_grid_initializer import DefaultGridInitializer
from grid_controller import GridController
from grid_errors import GridError
from view_renderer import render_status, render_view

try:
    __version__ = version("gridcore")
except PackageNotFoundError:
    __version__ = "0.0.0"

USAGE = (
    "gridcore - editable data grid engine\n\nUsage:\n"
    "  gridcore [path.csv] [-t TAB] [-s TERM] [-e OUT.csv] [--debug]\n"
    "  gridcore -v\n"
)


def _parse_args(args):
    opts = {"path": None, "tab": None, "search": None, "export": None, "debug": False}
    flags = {"-t": "tab", "-s": "search", "-e": "export"}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in flags:
            if i + 1 >= len(args):
                raise ValueError(f"{arg} requires a value")
            opts[flags[arg]] = args[i + 1]
            i += 2
            continue
        if arg == "--debug":
            opts["debug"] = True
        elif arg.startswith("-"):
            raise ValueError(f"Unknown option {arg}")
        elif opts["path"] is None:
            opts["path"] = arg
        else:
            raise ValueError("Only one input file is supported")
        i += 1
    return opts


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)

    if "-v" in args or "-V" in args:
        print(__version__)
        return 0

    if "-h" in args:
        print(USAGE)
        return 0

    try:
        opts = _parse_args(args)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 1

    if opts["debug"]:
        logging.basicConfig(level=logging.DEBUG, format="[%(name)s] %(levelname)s %(message)s")

    messages = []
    state = DefaultGridInitializer().create(config=config_paths.load_config())
    controller = GridController(state, lambda msg, _: messages.append(msg))

    try:
        if opts["path"]:
            CsvFileHandler(opts["path"]).load_into(controller)
        if opts["tab"]:
            controller.set_active_tab(opts["tab"])
        if opts["search"]:
            controller.set_search_term(opts["search"])
        if opts["export"]:
            CsvFileHandler(opts["export"]).save(controller.export_csv())
    except (ValueError, GridError, OSError, csv.Error) as exc:
        print(exc, file=sys.stderr)
        return 1

    width = shutil.get_terminal_size((120, 24)).columns if sys.stdout.isatty() else 1000
    print(render_view(state, width))
    print(
        render_status(
            {
                "status_msg": messages[-1] if messages else "",
                "active_tab": state.active_tab,
                "search_term": state.search_term,
                "view_mode": state.view_mode,
                "view_rows": len(state.view_row_ids()),
                "total_rows": len(state.store),
                "hidden": sorted(state.registry.hidden),
            },
            width,
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
