"""
Visitor Extraction
Derives an anonymous visitor id and a country from edge proxy headers.
"""

import ipaddress
import logging
import uuid
from typing import Mapping, Optional

from getclaps.core.config import settings

logger = logging.getLogger(__name__)

IP_HEADER = "cf-connecting-ip"
COUNTRY_HEADER = "cf-ipcountry"


def get_visitor(ip: Optional[str], ip_salt: Optional[str] = None) -> Optional[str]:
    """
    Hash an IP address into a UUIDv5 under the configured salt namespace.
    Returns None for a missing or unparsable address.
    """
    if not ip:
        return None
    try:
        namespace = uuid.UUID(ip_salt or settings.ip_salt)
        address = ipaddress.ip_address(ip.strip())
    except ValueError as e:
        logger.debug(f"Cannot derive visitor id: {e}")
        return None
    return str(uuid.uuid5(namespace, address.packed.hex()))


def extract_data(headers: Mapping[str, str]) -> dict:
    return {
        "country": headers.get(COUNTRY_HEADER),
        "visitor": get_visitor(headers.get(IP_HEADER)),
    }
