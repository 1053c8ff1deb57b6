import json
import os
from datetime import datetime, timezone

VERDICT_FILES = {
    "HALTS": "halting",
    "LOOPS": "looping",
    "RUNNING": "undecided",
}


class JSONLogger:
    def __init__(self, output_directory="logs/", log_file_prefix="turing_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(self.output_directory, exist_ok=True)
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def _get_log_filename(self):
        filename = f"{self.log_file_prefix}{self.today}.jsonl"  # JSON lines format
        return os.path.join(self.output_directory, filename)

    def _log_to_file(self, filename, entries):
        path = os.path.join(self.output_directory, filename)
        with open(path, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")

    def log(self, entry: dict):
        """Log a single entry to the main run log."""
        with open(self.current_log, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")

    def rotate(self):
        """Start a new main log file if the UTC date changed."""
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def log_summary(self, entries: list):
        """Log supervised run summaries (result, steps, loop period)."""
        self._log_to_file(os.path.basename(self.current_log), entries)

    def log_verdicts(self, entries: list):
        """Sort entries into halting_/looping_/undecided_ files by their "result" field."""
        grouped = {}
        for entry in entries:
            name = VERDICT_FILES.get(entry.get("result"))
            if name is None:
                raise ValueError(f"Entry has no known result: {entry!r}")
            grouped.setdefault(name, []).append(entry)
        for name, group in grouped.items():
            self._log_to_file(f"{name}_{self.today}.jsonl", group)

    def log_trace(self, entry: dict):
        """Append one step trace entry to the trace file."""
        self._log_to_file(f"trace_{self.today}.jsonl", [entry])
