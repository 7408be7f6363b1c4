"""
Vulnerability identifier formats.
"""
import re


CVE_PATTERN = re.compile(r"^CVE-\d{4}-\d{4,}$")
GHSA_PATTERN = re.compile(r"^GHSA(-[23456789cfghjmpqrvwx]{4}){3}$")
GENERIC_ID_PATTERN = re.compile(r"^[A-Z][A-Z0-9]*-[A-Za-z0-9][A-Za-z0-9._:-]*$")


def is_vulnerability_id(value: str) -> bool:
    """True for CVE, GHSA, or other PREFIX-rest identifiers (e.g. GO-2024-0001)."""
    if not isinstance(value, str):
        return False
    if value.startswith("CVE-"):
        return bool(CVE_PATTERN.match(value))
    if value.startswith("GHSA-"):
        return bool(GHSA_PATTERN.match(value))
    return bool(GENERIC_ID_PATTERN.match(value))
