import os


class UnsupportedFileType(ValueError):
    pass


class CsvFileHandler:
    def __init__(self, path: str):
        self.path = path
        _, ext = os.path.splitext(path)
        self.ext = ext.lower()

        if self.ext != ".csv":
            raise UnsupportedFileType("Unsupported file type (use .csv)")

    def exists(self) -> bool:
        return os.path.exists(self.path) and os.path.getsize(self.path) > 0

    def read_bytes(self) -> bytes:
        # whole file up front; import never streams
        with open(self.path, "rb") as f:
            return f.read()

    def load_into(self, controller):
        if not self.exists():
            return None
        return controller.import_csv(self.read_bytes())

    def save(self, text: str) -> None:
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
