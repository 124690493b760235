import re
from typing import Any, Dict, Tuple

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[0-9]{10,15}$")
ZIP_PATTERNS = {
    "US": re.compile(r"^\d{5}(-\d{4})?$"),
    "CA": re.compile(r"^[A-Za-z]\d[A-Za-z]\d[A-Za-z]\d$"),
    "GB": re.compile(r"^[A-Za-z]{1,2}\d[A-Za-z\d]?\s*\d[A-Za-z]{2}$"),
    "AU": re.compile(r"^\d{4}$"),
}
GENERIC_ZIP_RE = re.compile(r"^[0-9a-zA-Z-]{3,10}$")
ADDRESS_REQUIRED_FIELDS = ("firstName", "lastName", "address1", "city", "state", "zip", "country", "phone")


def validate_password_strength(v: str) -> str:
    if not re.search(r'[A-Z]', v):
        raise ValueError('Password must contain at least one uppercase letter')
    if not re.search(r'[a-z]', v):
        raise ValueError('Password must contain at least one lowercase letter')
    if not re.search(r'\d', v):
        raise ValueError('Password must contain at least one digit')
    if not re.search(r'[!@#$%^&*()_+\-=\[\]{};:\'\"\\|,.<>\/?]', v):
        raise ValueError('Password must contain at least one special character')
    return v


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def validate_phone(phone: str) -> bool:
    # Ignore espaces, tirets et parenthèses
    cleaned = re.sub(r"[\s\-()]", "", phone or "")
    return bool(PHONE_RE.match(cleaned))


def validate_zip(zip_code: str, country: str) -> bool:
    """Code postal selon le pays (US, CA, GB, AU), sinon 3-10 caractères alphanumériques."""
    raw = zip_code or ""
    cleaned = re.sub(r"\s", "", raw)
    country = (country or "").upper()
    if country == "GB":
        # Le format britannique tolère l'espace central
        return bool(ZIP_PATTERNS["GB"].match(raw.strip()))
    pattern = ZIP_PATTERNS.get(country, GENERIC_ZIP_RE)
    return bool(pattern.match(cleaned))


def validate_address(address: Dict[str, Any]) -> Tuple[bool, Dict[str, str]]:
    """
    Valide une adresse de livraison.
    Retour: (is_valid, errors) avec errors = {champ: message}.
    """
    address = address or {}
    errors: Dict[str, str] = {}
    for field in ADDRESS_REQUIRED_FIELDS:
        if not str(address.get(field) or "").strip():
            errors[field] = "This field is required"
    email = address.get("email")
    if email and not validate_email(email):
        errors["email"] = "Please enter a valid email address"
    phone = address.get("phone")
    if phone and not validate_phone(str(phone)):
        errors["phone"] = "Please enter a valid phone number"
    zip_code = address.get("zip")
    country = address.get("country")
    if zip_code and country and not validate_zip(str(zip_code), str(country)):
        errors["zip"] = "Please enter a valid ZIP/postal code"
    return (not errors, errors)


def format_phone(phone: str) -> str:
    cleaned = re.sub(r"[^\d+]", "", phone or "")
    if cleaned.startswith("+"):
        if len(cleaned) <= 4:
            return cleaned
        return f"{cleaned[:3]} {cleaned[3:6]} {cleaned[6:]}".strip()
    if len(cleaned) == 10:
        return f"({cleaned[:3]}) {cleaned[3:6]}-{cleaned[6:]}"
    return cleaned


def format_zip(zip_code: str, country: str) -> str:
    cleaned = re.sub(r"\s", "", zip_code or "")
    country = (country or "").upper()
    if country == "CA" and len(cleaned) == 6:
        return f"{cleaned[:3]} {cleaned[3:]}"
    if country == "GB" and len(cleaned) > 4:
        return f"{cleaned[:-3]} {cleaned[-3:]}"
    return zip_code
