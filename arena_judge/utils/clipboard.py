import logging
from typing import Callable

import pyperclip

logger = logging.getLogger(__name__)

MANUAL_COPY_BANNER = "Clipboard unavailable. Copy the text below manually:"


def present_for_manual_copy(text: str) -> None:
    print(MANUAL_COPY_BANNER)
    print(text)


# Copy to the clipboard; on failure show the text instead of raising
def copy_to_clipboard(
    text: str,
    copier: Callable[[str], None] = pyperclip.copy,
    fallback: Callable[[str], None] = present_for_manual_copy,
) -> bool:
    try:
        copier(text)
    except pyperclip.PyperclipException as e:
        logger.debug("Clipboard write failed: %s", e)
        fallback(text)
        return False
    return True
