"""
Utility functions shared across the harness
"""
import json
import logging
import os
import time
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None,
                  log_dir: str = "logs") -> logging.Logger:
    """Set up file and console logging for a run"""
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    if not log_file:
        log_file = str(Path(log_dir) / f"analytics_agent_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )

    return logging.getLogger("analytics_agent")


def get_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """Get current timestamp as string"""
    return datetime.now().strftime(format_str)


def save_json_results(data: Any, filepath: str, pretty: bool = True) -> None:
    """Save data to JSON file, converting dataclasses first"""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if is_dataclass(data) and not isinstance(data, type):
        data = asdict(data)

    with open(filepath, 'w', encoding='utf-8') as f:
        if pretty:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        else:
            json.dump(data, f, ensure_ascii=False, default=str)


class Timer:
    """Context manager for timing operations"""

    def __init__(self, description: str = "Operation"):
        self.description = description
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.time()

    @property
    def elapsed(self) -> float:
        """Get elapsed time in seconds"""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    def __str__(self) -> str:
        return f"{self.description}: {self.elapsed:.2f} seconds"
