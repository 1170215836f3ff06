"""IP matching and authentication against an external HTTP service."""

from __future__ import annotations

import ipaddress
import json
import urllib.error
import urllib.request
from typing import Iterable, Optional, Union

from mediaconf.params import IPEntry

_Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def _to_address(ip: object) -> Optional[_Address]:
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        address = ip
    elif isinstance(ip, str):
        try:
            address = ipaddress.ip_address(ip)
        except ValueError:
            return None
    else:
        return None
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def ip_equal_or_in_range(ip: object, entries: Iterable[IPEntry]) -> bool:
    """Whether ``ip`` equals one of the addresses or lies in one of the networks."""
    address = _to_address(ip)
    if address is None:
        return False
    for entry in entries:
        if isinstance(entry, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
            if entry.version == address.version and address in entry:
                return True
        elif _to_address(entry) == address:
            return True
    return False


def external_auth(
    url: str,
    ip: str,
    user: str,
    password: str,
    path: str,
    is_publishing: bool,
    query: str,
) -> None:
    """Ask an external HTTP service whether a client may read or publish.

    Raises PermissionError when the service answers with a non-2xx status,
    and OSError when it cannot be reached.
    """
    body = json.dumps(
        {
            "ip": ip,
            "user": user,
            "password": password,
            "path": path,
            "action": "publish" if is_publishing else "read",
            "query": query,
        }
    ).encode()
    request = urllib.request.Request(
        url,
        data=body,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request) as response:
            status = response.status
    except urllib.error.HTTPError as exc:
        status = exc.code
        exc.close()
    if status < 200 or status > 299:
        raise PermissionError(f"bad status code: {status}")