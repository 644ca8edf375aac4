"""Execution engine for the bridge plugin: bridge, veth pair and IPAM steps."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from .contexts import (
    ConfigureVethContext,
    CreateVethPairContext,
    DeleteLinkContext,
    GetContainerIPV4Context,
    LinkNotFoundError,
)
from .types import Addr, Interface, Link, Result

_FILE_EXISTS_ERR_MSG = "file exists"
_BRIDGE_LINK_TYPE = "bridge"


class EngineError(RuntimeError):
    """Raised when a step of the bridge plugin fails."""


class Engine:
    """Performs every operation the bridge plugin needs.

    The collaborators are injected: ``net_link`` manages links, addresses and
    routes, ``ns`` runs callables inside a network namespace, ``ip`` creates and
    deletes veth devices, and ``ipam`` invokes the IPAM plugin.
    """

    def __init__(
        self,
        *,
        net_link: Any = None,
        ns: Any = None,
        ip: Any = None,
        ipam: Any = None,
    ) -> None:
        self._net_link = net_link
        self._ns = ns
        self._ip = ip
        self._ipam = ipam

    def create_bridge(self, bridge_name: str, mtu: int) -> Link:
        """Create the bridge if needed, bring it up and return it."""
        bridge = self._lookup_bridge(bridge_name)
        if bridge is None:
            try:
                self._create_bridge(bridge_name, mtu)
            except EngineError as err:
                # Someone else may have created the bridge just before us.
                if _FILE_EXISTS_ERR_MSG not in str(err):
                    raise
            # Look the bridge up again so that every attribute is filled in.
            bridge = self._lookup_bridge(bridge_name)
            if bridge is None:
                raise EngineError(
                    f"bridge create: unable to find the bridge interface {bridge_name}"
                )

        try:
            self._net_link.link_set_up(bridge)
        except Exception as err:
            raise EngineError(
                "bridge create: unable to bring up the bridge interface "
                f"{bridge_name}: {err}"
            ) from err
        return bridge

    def _lookup_bridge(self, bridge_name: str) -> Link | None:
        try:
            link = self._net_link.link_by_name(bridge_name)
        except LinkNotFoundError:
            return None
        except Exception as err:
            raise EngineError(
                f"bridge create: error lookup the bridge interface {bridge_name}: {err}"
            ) from err

        if getattr(link, "link_type", None) != _BRIDGE_LINK_TYPE:
            raise EngineError(
                f"bridge create: interface named {bridge_name} already exists, "
                "but is not a bridge"
            )
        return link

    def _create_bridge(self, bridge_name: str, mtu: int) -> None:
        bridge = Link(
            name=bridge_name, mtu=mtu, link_type=_BRIDGE_LINK_TYPE, tx_queue_len=-1
        )
        try:
            self._net_link.link_add(bridge)
        except Exception as err:
            raise EngineError(
                f"bridge create: unable to add bridge interface {bridge_name}: {err}"
            ) from err

    def create_veth_pair(
        self, netns_name: str, mtu: int, interface_name: str
    ) -> tuple[Interface | None, str]:
        """Create the veth pair; return the container interface and host veth name."""
        context = CreateVethPairContext(interface_name, mtu, self._ip)
        self._ns.with_netns_path(netns_name, context.run)
        return context.container_interface_result, context.host_veth_name

    def attach_host_veth_interface_to_bridge(
        self, host_veth_name: str, bridge: Link
    ) -> Interface:
        """Attach the host end of the veth pair to the bridge."""
        try:
            host_veth = self._net_link.link_by_name(host_veth_name)
        except Exception as err:
            raise EngineError(
                "bridge create veth pair: unable to look up host veth interface "
                f"{host_veth_name}: {err}"
            ) from err

        try:
            self._net_link.link_set_master(host_veth, bridge)
        except Exception as err:
            raise EngineError(
                "bridge create veth pair: unable to attach the veth interface "
                f"{host_veth_name} to bridge: {err}"
            ) from err

        return Interface(name=host_veth_name, mac=host_veth.hardware_addr)

    def run_ipam_plugin_add(self, plugin: str, net_conf: bytes) -> Result:
        """Run the IPAM plugin's ADD command and validate its result."""
        try:
            ipam_result = self._ipam.exec_add(plugin, net_conf)
        except Exception as err:
            raise EngineError(
                f"bridge ipam ADD: failed to execute plugin: {plugin}: {err}"
            ) from err

        if not isinstance(ipam_result, Result):
            raise EngineError(
                f"bridge IPAM ADD: unable to parse result '{ipam_result}'"
            )
        result = ipam_result

        # Only one address is expected from the IPAM plugin.
        if len(result.ips) != 1:
            raise EngineError("bridge IPAM ADD: Missing IP config in result")
        if result.ips[0].address is None:
            raise EngineError("bridge IPAM ADD: IP address mask not set in result")
        if result.ips[0].gateway is None:
            raise EngineError("bridge IPAM ADD: Gateway not set in result")
        return result

    def configure_container_veth_interface(
        self, netns_name: str, result: Result, interface_name: str
    ) -> None:
        """Configure the container's veth interface and routes."""
        context = ConfigureVethContext(
            interface_name, result, self._ip, self._ipam, self._net_link
        )
        self._ns.with_netns_path(netns_name, context.run)

    def configure_bridge(self, result: Result, bridge: Link) -> None:
        """Assign the gateway address to the bridge unless it already has it."""
        try:
            addrs = self._net_link.addr_list(bridge, socket.AF_INET)
        except FileNotFoundError:
            addrs = []
        except Exception as err:
            raise EngineError(
                f"bridge configure: unable to list addresses for bridge {bridge.name}: {err}"
            ) from err

        ip_config = result.ips[0]
        bridge_network = ipaddress.ip_interface(
            (ip_config.gateway, ip_config.address.network.prefixlen)
        )
        bridge_cidr = str(bridge_network)

        if addrs:
            if any(str(addr.ip_net) == bridge_cidr for addr in addrs):
                return
            raise EngineError("bridge configure: mismatch in bridge ip address")

        try:
            self._net_link.addr_add(bridge, Addr(ip_net=bridge_network))
        except Exception as err:
            # Someone else may have assigned the address just before us.
            if _FILE_EXISTS_ERR_MSG in str(err):
                return
            raise EngineError(
                "bridge configure: unable to assign ip address to bridge "
                f"{bridge.name}: {err}"
            ) from err

    def get_interface_ipv4_address(self, netns_name: str, interface_name: str) -> str:
        """Return the IPv4 address of an interface in the container."""
        context = GetContainerIPV4Context(interface_name, self._net_link)
        self._ns.with_netns_path(netns_name, context.run)
        return context.ipv4_addr

    def run_ipam_plugin_del(self, plugin: str, net_conf: bytes) -> None:
        """Run the IPAM plugin's DEL command."""
        try:
            self._ipam.exec_del(plugin, net_conf)
        except Exception as err:
            raise EngineError(
                f"bridge ipam DEL: failed to execute the plugin: {plugin}: {err}"
            ) from err

    def delete_veth(self, netns_name: str, interface_name: str) -> None:
        """Delete the veth interface in the container."""
        context = DeleteLinkContext(interface_name, self._ip)
        self._ns.with_netns_path(netns_name, context.run)