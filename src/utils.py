# utils.py
#
# Description:
# This module contains utility functions used across the application,
# such as setting up logging, normalizing ingredient names for comparison,
# and loading/saving requests and plans as JSON.

import json
import logging
import os
import re
import unicodedata
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config import LOG_FILE_PATH
from models import MealPlan


class NoiseFilter(logging.Filter):
    """A filter to suppress common, noisy log messages from libraries."""

    def __init__(self, patterns_to_suppress):
        super().__init__()
        self.patterns = patterns_to_suppress

    def filter(self, record):
        message = record.getMessage()
        return not any(p in message for p in self.patterns)


def setup_logging():
    """Configures the logging for the application."""
    log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler(LOG_FILE_PATH, mode='a', encoding='utf-8')],
        force=True
    )

    patterns_to_silence = [
        "HTTP Request:", "Websocket", '"client":', '"event":',
        'lmstudio-greeting', "127.0.0.1:", "ws://", "Switching Protocols",
        "AFC is enabled", "AFC remote call", "Both GOOGLE_API_KEY and GEMINI_API_KEY are set"
    ]
    noise_filter = NoiseFilter(patterns_to_silence)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.addFilter(noise_filter)

    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('google.genai').setLevel(logging.WARNING)
    logging.getLogger('lmstudio').setLevel(logging.WARNING)


_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """
    Lowercases a name and strips its accents so 'Pão' and 'pao' compare equal.
    """
    decomposed = unicodedata.normalize("NFD", (name or "").lower())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return _WHITESPACE.sub(" ", stripped).strip()


def names_overlap(a: str, b: str) -> bool:
    """True when either normalized name contains the other."""
    na, nb = normalize_name(a), normalize_name(b)
    if not na or not nb:
        return False
    return na in nb or nb in na


def load_json(path: str) -> Dict[str, Any]:
    """Loads a JSON object from a file, returning an empty dict if it is missing or invalid."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def save_plan(plan: MealPlan, path: str):
    """Saves a plan as camelCase JSON."""
    directory = os.path.dirname(path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(plan.model_dump_json(by_alias=True, indent=4))
    except OSError as e:
        logging.error(f"Failed to save plan to {path}: {e}")


def load_plan(path: str) -> Optional[MealPlan]:
    """Loads a plan saved by save_plan, or None if the file is missing or does not match the schema."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return MealPlan.model_validate_json(f.read())
    except FileNotFoundError:
        return None
    except ValidationError as e:
        logging.error(f"Stored plan at {path} does not match the MealPlan schema: {e}")
        return None
