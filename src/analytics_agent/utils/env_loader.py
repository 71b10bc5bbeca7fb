"""
Environment variable loading utilities
"""
import os
from pathlib import Path
from typing import Union


def load_env_file(env_file: Union[str, Path] = ".env") -> bool:
    """Load KEY=value pairs from a .env file if it exists.

    Variables already present in the environment win.
    """
    env_path = Path(env_file)
    if not env_path.exists():
        return False

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#') or '=' not in line:
                continue
            if line.startswith('export '):
                line = line[7:]
            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value

    return True
