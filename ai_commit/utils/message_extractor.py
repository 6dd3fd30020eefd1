"""
Commit message extraction and cleaning utilities.
"""

import re
from typing import Optional
from loguru import logger


class MessageExtractor:
    """Turn a raw model response into a single commit summary line."""

    # Leading phrases some models put before the actual message
    PREFIXES = (
        "commit message:", "suggested commit message:", "commit:",
        "message:", "answer:", "response:", "summary:",
        "here is the commit message:", "the commit message is:",
    )

    def __init__(self, character_limit: int = 150):
        """Initialize message extractor."""
        self.character_limit = character_limit
        self._think_pattern = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
        self._fence_pattern = re.compile(r"^```[\w-]*\s*$")

    def extract_commit_message(self, raw_response: str) -> Optional[str]:
        """Return the first meaningful line of the response, cleaned and length-limited."""
        logger.debug(f"Extracting commit message from {len(raw_response)} char response")

        text = self._think_pattern.sub("", raw_response)
        # Unbalanced tags: reasoning ends at a stray </think> and starts at a stray <think>
        lowered = text.lower()
        if "</think>" in lowered:
            text = text[lowered.rindex("</think>") + len("</think>"):]
            lowered = text.lower()
        if "<think>" in lowered:
            text = text[:lowered.index("<think>")]

        for line in text.splitlines():
            line = line.strip()
            if not line or self._fence_pattern.match(line):
                continue

            line = self._clean_line(line)
            if line:
                return self._finalize_message(line)

        logger.warning("No commit message found in response")
        return None

    def _clean_line(self, line: str) -> str:
        line = line.replace("**", "")
        lowered = line.lower()
        for prefix in self.PREFIXES:
            if lowered.startswith(prefix):
                line = line[len(prefix):].strip()
                logger.debug(f"Removed prefix '{prefix}' from response")
                break

        line = re.sub(r'^[-*]\s+', '', line)
        line = re.sub(r'^["\'`]+|["\'`]+$', '', line)
        return ' '.join(line.split())

    def _finalize_message(self, message: str) -> str:
        """Finalize message with length checks."""
        if len(message) > self.character_limit:
            message = self._smart_truncate(message)
        return message

    def _smart_truncate(self, message: str) -> str:
        """Intelligently truncate long messages."""
        if len(message) <= self.character_limit:
            return message

        # Try to preserve the type and scope
        parts = message.split(':', 1)
        if len(parts) != 2:
            return message[:self.character_limit - 3] + "..."

        prefix, description = parts
        description = description.strip()

        available_space = self.character_limit - len(prefix) - 2  # -2 for ": "

        if available_space <= 10:
            return message[:self.character_limit - 3] + "..."

        if len(description) > available_space:
            truncated = description[:available_space - 3]
            last_space = truncated.rfind(' ')

            if last_space > available_space // 2:
                truncated = truncated[:last_space]

            description = truncated + "..."

        return f"{prefix}: {description}"
