import re
from typing import Optional
import bleach


def sanitize_input(value: Optional[str]) -> str:
    """Sanitize a user- or provider-supplied string before it is stored.

    - Strips HTML tags using bleach.clean(..., strip=True)
    - Collapses runs of whitespace
    - Trims whitespace
    """
    if value is None:
        return ""
    # remove NULL bytes
    val = value.replace("\x00", "")
    # strip tags; keep ampersands readable in names like "Smith & Sons"
    val = bleach.clean(val, tags=[], strip=True)
    val = val.replace("&amp;", "&")
    val = re.sub(r"\s+", " ", val)
    return val.strip()


def split_display_name(display_name: Optional[str]) -> tuple[str, str]:
    """First token is the first name; the last token (if there is more than one) the last name."""
    parts = (display_name or "").split()
    if not parts:
        return "", ""
    first_name = parts[0]
    last_name = parts[-1] if len(parts) > 1 else ""
    return first_name, last_name
