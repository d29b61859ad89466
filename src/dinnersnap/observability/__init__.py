"""
DinnerSnap - Observability Package.

Provides:
- Process logging setup
- Generative prompt logging to local files
"""

import logging
import sys

from dinnersnap.observability.prompt_logger import enable_prompt_logging, log_prompt


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Setup logging with visible output."""
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


__all__ = [
    "enable_prompt_logging",
    "log_prompt",
    "setup_logging",
]
