"""Domain constants.

Minor units follow the ISO 4217 list; only currencies whose minor unit is
not 2 are listed, everything else rounds to cents.
"""

import re
from typing import Dict, Pattern

CURRENCY_CODE_PATTERN: Pattern[str] = re.compile(r"^[A-Z]{3}$")
# ExchangeRate-API v6 keys
API_KEY_PATTERN: Pattern[str] = re.compile(r"^[A-Za-z0-9]{24}$")

DEFAULT_MINOR_UNITS = 2

MINOR_UNITS: Dict[str, int] = {
    # zero-decimal
    "BIF": 0,
    "CLP": 0,
    "DJF": 0,
    "GNF": 0,
    "ISK": 0,
    "JPY": 0,
    "KMF": 0,
    "KRW": 0,
    "PYG": 0,
    "RWF": 0,
    "UGX": 0,
    "UYI": 0,
    "VND": 0,
    "VUV": 0,
    "XAF": 0,
    "XOF": 0,
    "XPF": 0,
    # three-decimal
    "BHD": 3,
    "IQD": 3,
    "JOD": 3,
    "KWD": 3,
    "LYD": 3,
    "OMR": 3,
    "TND": 3,
    # four-decimal
    "CLF": 4,
    "UYW": 4,
}

LOCATION_LOOKUP_KEY = "location"
