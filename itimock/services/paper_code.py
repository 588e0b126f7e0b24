import random
import re
import string
from datetime import datetime, timedelta, timezone
from typing import Optional
from itimock.core.config import settings

PAPER_CODE_RE = re.compile(r"^[A-Z]{3}\d{8}\d{4}[A-Z]{2}$")

def paper_code_tz() -> timezone:
    return timezone(timedelta(minutes=settings.PAPER_CODE_UTC_OFFSET_MINUTES))

def trade_prefix(trade_name: str) -> str:
    letters = [c for c in (trade_name or "").upper() if c in string.ascii_uppercase]
    return "".join(letters[:3]).ljust(3, "X")

def generate_paper_code(trade_name: str, now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """``<3-letter trade prefix><YYYYMMDD><HHMM><2 random letters>`` in IST."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(paper_code_tz())
    suffix = "".join(rng.choice(string.ascii_uppercase) for _ in range(2))
    return f"{trade_prefix(trade_name)}{local:%Y%m%d%H%M}{suffix}"

def is_valid_paper_code(code: str) -> bool:
    return bool(code) and PAPER_CODE_RE.match(code) is not None
