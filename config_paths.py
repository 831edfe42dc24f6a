import json
import os

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "gridcore")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# default settings
TABS_DEFAULT = {
    "All": None,
    "Pending": "need to start",
    "Reviewed": "in-process",
    "Arrived": "complete",
}
SEARCHABLE_COLUMNS_DEFAULT = ["job", "status", "submitter", "url", "assigned"]
CURRENCY_SYMBOL_DEFAULT = "$"
SHARE_ORIGIN_DEFAULT = "http://localhost"


def default_config():
    return {
        "TABS": dict(TABS_DEFAULT),
        "SEARCHABLE_COLUMNS": list(SEARCHABLE_COLUMNS_DEFAULT),
        "CURRENCY_SYMBOL": CURRENCY_SYMBOL_DEFAULT,
        "SHARE_ORIGIN": SHARE_ORIGIN_DEFAULT,
    }


def load_config():
    cfg = default_config()

    if not os.path.exists(CONFIG_JSON):
        return cfg

    try:
        with open(CONFIG_JSON, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return cfg
    if not isinstance(data, dict):
        return cfg

    tabs = data.get("tabs")
    if isinstance(tabs, dict) and tabs:
        cleaned = {}
        for name, status in tabs.items():
            if not isinstance(name, str):
                continue
            if status is not None and not isinstance(status, str):
                continue
            cleaned[name] = status
        if cleaned:
            cfg["TABS"] = cleaned

    searchable = data.get("searchable_columns")
    if isinstance(searchable, list) and all(isinstance(x, str) for x in searchable):
        cfg["SEARCHABLE_COLUMNS"] = list(searchable)

    for json_key, cfg_key in (
        ("currency_symbol", "CURRENCY_SYMBOL"),
        ("share_origin", "SHARE_ORIGIN"),
    ):
        value = data.get(json_key)
        if isinstance(value, str) and value:
            cfg[cfg_key] = value

    return cfg
