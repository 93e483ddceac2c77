import sys

from thymescan.config.base import LOG_COLORS


class Log:

    @staticmethod
    def _print(message: str, color: str = "", file=None):
        print(f"{color}{message}{LOG_COLORS['RESET']}", file=file or sys.stdout)

    @staticmethod
    def info(message: str):
        Log._print(message, LOG_COLORS["INFO"])

    @staticmethod
    def success(message: str):
        Log._print(message, LOG_COLORS["SUCCESS"])

    @staticmethod
    def warning(message: str):
        Log._print(message, LOG_COLORS["WARNING"])

    @staticmethod
    def error(message: str):
        Log._print(message, LOG_COLORS["ERROR"], file=sys.stderr)

    @staticmethod
    def detail(message: str):
        Log._print(message, LOG_COLORS["GRAY"])

    @staticmethod
    def created(path: str):
        Log._print(f"Created: {path}", LOG_COLORS["SUCCESS"])

    @staticmethod
    def generated(path: str, count: int):
        Log._print(f"Generated {count} variables in: {path}", LOG_COLORS["SUCCESS"])

    @staticmethod
    def resolved(reference: str, location: str):
        Log._print(f"Resolved: {reference} -> {location}", LOG_COLORS["SUCCESS"])

    @staticmethod
    def unresolved(reference: str):
        Log._print(f"Unresolved: {reference}", LOG_COLORS["WARNING"])

    @staticmethod
    def scanned(path: str, count: int, kind: str):
        Log._print(f"Scanned {path}: {count} {kind}", LOG_COLORS["INFO"])

    @staticmethod
    def completed(task: str, location: str):
        Log._print(f"{task} completed at: {location}", LOG_COLORS["SUCCESS"])
