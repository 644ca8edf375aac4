"""Operations run inside a container's network namespace."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from .types import Interface, Result, Route

FAMILY_ALL = 0
FAMILY_V4 = socket.AF_INET


class LinkNotFoundError(LookupError):
    """Raised when a named network link does not exist."""


class ConfigureVethContext:
    """Configures the container end of the veth pair and its routes."""

    def __init__(
        self,
        interface_name: str,
        result: Result,
        ip: Any,
        ipam: Any,
        net_link: Any,
    ) -> None:
        self.interface_name = interface_name
        self.result = result
        self._ip = ip
        self._ipam = ipam
        self._net_link = net_link

    def run(self, host_ns: Any) -> None:
        """Set up the interface, its hardware address and its routes."""
        name = self.interface_name
        ip_config = self.result.ips[0]

        # Route for ARP queries from the host, via the gateway itself.
        gateway = ip_config.gateway
        dst = (
            ipaddress.ip_network((gateway, gateway.max_prefixlen))
            if gateway is not None
            else None
        )
        self.result.routes.append(Route(dst=dst))

        try:
            self._ipam.configure_iface(name, self.result)
        except Exception as err:
            raise RuntimeError(
                f"bridge configure veth: unable to configure interface: {name}: {err}"
            ) from err

        address = ip_config.address.ip if ip_config.address is not None else None
        try:
            self._ip.set_hw_addr_by_ip(name, address, None)
        except Exception as err:
            raise RuntimeError(
                "bridge configure veth: unable to set hardware address for "
                f"interface: {name}: {err}"
            ) from err

        try:
            link = self._net_link.link_by_name(name)
        except Exception as err:
            raise RuntimeError(
                f"bridge configure veth: unable to get link for interface: {name}: {err}"
            ) from err

        try:
            routes = self._net_link.route_list(link, FAMILY_ALL)
        except Exception as err:
            raise RuntimeError(
                f"bridge configure veth: unable to fetch routes for interface: {name}: {err}"
            ) from err

        for route in routes or ():
            if route.gw is None:
                try:
                    self._net_link.route_del(route)
                except Exception as err:
                    raise RuntimeError(
                        f"bridge configure veth: unable to delete route: {route}: {err}"
                    ) from err


class CreateVethPairContext:
    """Creates the veth pair that joins the container to the bridge."""

    def __init__(self, interface_name: str, mtu: int, ip: Any) -> None:
        self.interface_name = interface_name
        self.mtu = mtu
        self._ip = ip
        self.host_veth_name = ""
        self.container_interface_result: Interface | None = None

    def run(self, host_ns: Any) -> None:
        """Create the pair and record both ends."""
        try:
            host_veth, container_veth = self._ip.setup_veth(
                self.interface_name, self.mtu, host_ns
            )
        except Exception as err:
            raise RuntimeError(
                "bridge create veth pair: unable to setup veth pair for interface: "
                f"{self.interface_name}: {err}"
            ) from err

        self.host_veth_name = host_veth.name
        self.container_interface_result = Interface(
            name=container_veth.name, mac=container_veth.hardware_addr
        )


class DeleteLinkContext:
    """Deletes the container end of the veth pair."""

    def __init__(self, interface_name: str, ip: Any) -> None:
        self.interface_name = interface_name
        self._ip = ip

    def run(self, host_ns: Any) -> None:
        """Delete the link; a link that is already gone is not an error."""
        try:
            self._ip.del_link_by_name_addr(self.interface_name, FAMILY_V4)
        except LinkNotFoundError:
            return
        except Exception as err:
            raise RuntimeError(
                "bridge delete veth: unable to delete link for interface: "
                f"{self.interface_name}: {err}"
            ) from err


class GetContainerIPV4Context:
    """Looks up the IPv4 address of the container's interface."""

    def __init__(self, interface_name: str, net_link: Any) -> None:
        self.interface_name = interface_name
        self._net_link = net_link
        self.ipv4_addr = ""

    def run(self, host_ns: Any) -> None:
        """Record the first IPv4 address of the interface."""
        name = self.interface_name
        try:
            link = self._net_link.link_by_name(name)
        except Exception as err:
            raise RuntimeError(
                f"bridge getipv4 address: unable to get link for interface: {name}: {err}"
            ) from err

        try:
            addrs = self._net_link.addr_list(link, FAMILY_V4)
        except Exception as err:
            raise RuntimeError(
                "bridge getipv4 address: unable to list ipv4 addresses for "
                f"interface: {name}: {err}"
            ) from err

        if not addrs:
            raise RuntimeError(
                f"bridge getipv4 address: no ipv4 addresses returned for interface: {name}"
            )

        self.ipv4_addr = str(addrs[0].ip_net.ip)