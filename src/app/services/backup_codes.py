"""
MFA backup codes

Ten single-use 8-digit codes per device. Only SHA-256 digests are stored.
"""

import hashlib
import hmac
import secrets
from typing import List, Optional

BACKUP_CODE_COUNT = 10
BACKUP_CODE_DIGITS = 8


def generate_backup_codes(count: int = BACKUP_CODE_COUNT) -> List[str]:
    codes: List[str] = []
    while len(codes) < count:
        code = f"{secrets.randbelow(10 ** BACKUP_CODE_DIGITS):0{BACKUP_CODE_DIGITS}d}"
        if code not in codes:
            codes.append(code)
    return codes


def hash_backup_code(code: str) -> str:
    return hashlib.sha256(code.strip().encode("utf-8")).hexdigest()


def match_backup_code(code: str, hashes: List[str]) -> Optional[str]:
    """Stored digest matching `code`, or None"""
    candidate = hash_backup_code(code)
    for stored in hashes:
        if hmac.compare_digest(stored, candidate):
            return stored
    return None
