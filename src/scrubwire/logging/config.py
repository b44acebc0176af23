"""
Runtime logging settings.

``LoggingConfig`` is what ``LoggingManager`` consumes. The ``[logging]``
section of the configuration file is validated by pydantic first and then
converted into one of these.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMATS = ("console", "json", "rich")
LOG_OUTPUTS = ("console", "file")
DEFAULT_LOG_FILE = Path("logs") / "scrubwire.log"


@dataclass
class LoggingConfig:
    """Level, format and destinations of scrubwire log records.

    ``level`` accepts a level name or number and ``output`` a single
    destination or a list of them; both are normalized on creation.
    """

    level: Union[str, int] = logging.INFO
    format_type: str = "console"
    output: Union[str, List[str]] = field(default_factory=lambda: ["console"])
    file_path: Optional[Path] = None
    max_file_size: int = 10 * 1024 * 1024
    backup_count: int = 5
    service_name: str = "scrubwire"
    version: str = "unknown"

    def __post_init__(self):
        if isinstance(self.level, str):
            level = logging.getLevelName(self.level.upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level: {self.level}")
            self.level = level

        if self.format_type not in LOG_FORMATS:
            raise ValueError(f"format_type must be one of: {', '.join(LOG_FORMATS)}")

        outputs = [self.output] if isinstance(self.output, str) else list(self.output)
        unknown = [name for name in outputs if name not in LOG_OUTPUTS]
        if unknown:
            raise ValueError(f"Unknown log output(s): {', '.join(unknown)}")
        self.output = outputs

        if self.file_path is not None:
            self.file_path = Path(self.file_path)

    @property
    def log_file(self) -> Path:
        """File used by the ``file`` output."""
        return self.file_path or DEFAULT_LOG_FILE
