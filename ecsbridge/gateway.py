"""Computing and validating IPv4 gateway addresses from CIDR blocks."""

from __future__ import annotations

import ipaddress

_MIN_IPV4_CIDR_BLOCK_SIZE = 28
_MAX_IPV4_CIDR_BLOCK_SIZE = 16

_IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class ParseIPV4GatewayNetmaskError(ValueError):
    """Raised when a CIDR block holds no IPv4 address."""

    def __init__(self, operation: str, origin: str, message: str) -> None:
        super().__init__(f"{operation} {origin}: {message}")
        self.operation = operation
        self.origin = origin
        self.message = message


def _parse_cidr(cidr_block: str) -> tuple[_IPAddress, int]:
    """Split ``address/prefix`` into an address and prefix length."""
    invalid = ValueError(f"invalid CIDR address: {cidr_block}")
    addr, sep, prefix = cidr_block.partition("/")
    if not sep or not prefix.isascii() or not prefix.isdigit() or "%" in addr:
        raise invalid
    try:
        ip = ipaddress.ip_address(addr)
    except ValueError:
        raise invalid from None
    ones = int(prefix)
    if ones > ip.max_prefixlen:
        raise invalid
    return ip, ones


def _to4(ip: _IPAddress) -> ipaddress.IPv4Address | None:
    if isinstance(ip, ipaddress.IPv4Address):
        return ip
    return ip.ipv4_mapped


def _check_block_size(operation: str, ones: int) -> None:
    if ones > _MIN_IPV4_CIDR_BLOCK_SIZE:
        raise ValueError(f"{operation}: invalid ipv4 cidr block, {ones} > 28")
    if ones < _MAX_IPV4_CIDR_BLOCK_SIZE:
        raise ValueError(f"{operation}: invalid ipv4 cidr block, {ones} <= 16")


def compute_ipv4_gateway_netmask(cidr_block: str) -> tuple[str, str]:
    """Return the subnet gateway (address + 1) and prefix length of a CIDR block."""
    operation = "compute ipv4 gateway netmask"
    try:
        ip, ones = _parse_cidr(cidr_block)
    except ValueError as err:
        raise ValueError(
            f"{operation}: unable to parse cidr: '{cidr_block}': {err}"
        ) from err

    ip4 = _to4(ip)
    if ip4 is None:
        raise ParseIPV4GatewayNetmaskError(
            operation,
            "engine",
            f"unable to parse ipv4 gateway from cidr block '{cidr_block}'",
        )

    _check_block_size(operation, ones)

    octets = bytearray(ip4.packed)
    octets[3] = (octets[3] + 1) % 256
    return str(ipaddress.IPv4Address(bytes(octets))), str(ones)


def parse_ipv4_gateway_netmask(cidr_block: str) -> tuple[str, str]:
    """Validate a CIDR block and return its address and prefix length."""
    operation = "parse ipv4 gateway netmask"
    try:
        ip, ones = _parse_cidr(cidr_block)
    except ValueError as err:
        raise ValueError(
            f"{operation}: unable to parse ipv4 subnet gateway from config: "
            f"'{cidr_block}': {err}"
        ) from err

    ip4 = _to4(ip)
    if ip4 is None:
        raise ValueError(
            f"{operation}: unable to parse ipv4 gateway from config: '{cidr_block}'"
        )

    _check_block_size(operation, ones)
    return str(ip4), str(ones)