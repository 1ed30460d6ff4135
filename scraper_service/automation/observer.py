"""Structured scrape events routed through loguru."""

from typing import Any, Dict, List

from loguru import logger


class ScrapeObserver:
    """Receives every pipeline event and decides what to emit.

    The engine reports unconditionally; verbosity is decided here. Events go
    out at INFO for debug-flagged scrapes and at DEBUG otherwise, so the
    configured sink level filters them. Warnings are always emitted and also
    kept on ``warnings`` for the caller.
    """

    def __init__(self, url: str, verbose: bool = False) -> None:
        self.verbose = verbose
        self.warnings: List[Dict[str, Any]] = []
        self._log = logger.bind(url=url)

    def event(self, name: str, **fields: Any) -> None:
        """Record a progress event."""
        level = "INFO" if self.verbose else "DEBUG"
        self._log.bind(event=name, **fields).log(level, self._format(name, fields))

    def warning(self, name: str, **fields: Any) -> None:
        """Record a recoverable problem."""
        self.warnings.append({"event": name, **fields})
        self._log.bind(event=name, **fields).warning(self._format(name, fields))

    def failure(self, error: BaseException) -> None:
        """Record the fatal error that ended a scrape."""
        self._log.bind(event="scrape_failed", error_type=type(error).__name__).error(
            f"scrape_failed: {error}"
        )

    @staticmethod
    def _format(name: str, fields: Dict[str, Any]) -> str:
        if not fields:
            return name
        details = " ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))
        return f"{name} {details}"
