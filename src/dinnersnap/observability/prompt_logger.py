"""
DinnerSnap - Prompt Logger.

Writes each generative prompt and its raw reply to a markdown file for
debugging recipe quality. Enabled via DINNERSNAP_LOG_PROMPTS=1 or the
--log-prompts CLI flag.
"""

import logging
import os
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

LOG_PROMPTS = os.getenv("DINNERSNAP_LOG_PROMPTS", "0") == "1"
LOG_DIR = Path("prompt_logs")

_session_id: str | None = None
_call_counter: int = 0


def enable_prompt_logging(enabled: bool = True, log_dir: Path | None = None) -> None:
    """Enable or disable prompt logging."""
    global LOG_PROMPTS, LOG_DIR
    LOG_PROMPTS = enabled
    if log_dir is not None:
        LOG_DIR = log_dir


def _session_dir() -> Path:
    global _session_id
    if _session_id is None:
        _session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_dir = LOG_DIR / _session_id
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def log_prompt(
    *,
    source: str,
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float | None = None,
    response: str | None = None,
    error: str | None = None,
) -> Path | None:
    """
    Log a prompt and its raw response to a file.

    Args:
        source: Which provider made this call (e.g. "generative")
        model: The model used
        system_prompt: The system prompt
        user_prompt: The user prompt
        temperature: Sampling temperature sent with the call
        response: The raw message content (optional)
        error: Any error that occurred (optional)

    Returns:
        Path to the log file, or None if logging is disabled or the write failed
    """
    if not LOG_PROMPTS:
        return None

    global _call_counter
    _call_counter += 1

    temperature_str = f"\n**Temperature:** {temperature}" if temperature is not None else ""
    content = f"""# Generative Call: {source}

**Time:** {datetime.now().isoformat()}
**Model:** {model}{temperature_str}

---

## System Prompt

```
{system_prompt}
```

---

## User Prompt

```
{user_prompt}
```

---

## Response

"""
    if error:
        content += f"**ERROR:** {error}\n"
    elif response:
        content += f"```json\n{response}\n```\n"
    else:
        content += "(No response)\n"

    try:
        filepath = _session_dir() / f"{_call_counter:02d}_{source}.md"
        filepath.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not write prompt log: {e}")
        return None
    return filepath


def reset_session() -> None:
    """Reset the session (for testing)."""
    global _session_id, _call_counter
    _session_id = None
    _call_counter = 0
