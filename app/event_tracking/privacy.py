"""
Privacy helpers: address anonymization, crawler and device detection.
"""

import ipaddress
import re
from typing import Optional, Union

BOT_PATTERN = re.compile(
    r"bot|spider|crawler|httpclient|headless|uptime|monitor|seo|preview|"
    r"facebookexternalhit|whatsapp|telegram|slack|discord|curl|wget",
    re.IGNORECASE,
)


def _parse_ip(ip: str) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    try:
        return ipaddress.ip_address((ip or "").strip())
    except ValueError:
        return None


def anonymize_ip(ip: str) -> str:
    """Drop the low-order part of an address before it is stored.

    IPv4 keeps the first two octets (``203.0.113.7`` -> ``203.0.0.0``),
    IPv6 keeps the first four hextets (``2001:db8:85a3:8d3::1`` ->
    ``2001:db8:85a3:8d3::``). Nothing is kept that maps back to the
    original address.
    """
    addr = _parse_ip(ip)
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        addr = addr.ipv4_mapped

    if isinstance(addr, ipaddress.IPv4Address):
        octets = str(addr).split(".")
        return f"{octets[0]}.{octets[1]}.0.0"

    if isinstance(addr, ipaddress.IPv6Address):
        hextets = [format(int(h, 16), "x") for h in addr.exploded.split(":")[:4]]
        return ":".join(hextets) + "::"

    # Unparseable input: apply the same truncation textually
    ip = (ip or "").strip()
    if ":" in ip:
        parts = (ip.split(":") + ["0"] * 8)[:4]
        return ":".join(p or "0" for p in parts) + "::"
    octets = ip.split(".")
    if len(octets) >= 2:
        return f"{octets[0]}.{octets[1]}.0.0"
    return ""


def is_private_ip(ip: str) -> bool:
    """Check if an address is private, loopback or otherwise not routable."""
    addr = _parse_ip(ip)
    if addr is None:
        return True
    return (
        addr.is_private
        or addr.is_loopback
        or addr.is_link_local
        or addr.is_reserved
        or addr.is_unspecified
        or addr.is_multicast
    )


def is_bot(user_agent: str) -> bool:
    """Check a user agent against common crawler and link-preview keywords."""
    return bool(BOT_PATTERN.search(user_agent or ""))


def classify_device(user_agent: str) -> str:
    """Derive the device class from a user agent.

    Returns:
        ``tablet``, ``mobile`` or ``desktop``
    """
    ua = (user_agent or "").lower()
    is_ipad = "ipad" in ua
    is_android_tablet = "android" in ua and "mobile" not in ua
    is_tablet = is_ipad or is_android_tablet or "tablet" in ua
    is_mobile = ("mobi" in ua or "android" in ua) and not is_tablet

    if is_mobile:
        return "mobile"
    if is_tablet:
        return "tablet"
    return "desktop"
