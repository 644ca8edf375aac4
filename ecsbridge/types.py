"""Configuration and result types shared by the bridge plugin."""

from __future__ import annotations

import ipaddress
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

_log = logging.getLogger(__name__)

DEFAULT_MTU = 1500

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
IPInterface = ipaddress.IPv4Interface | ipaddress.IPv6Interface
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


@dataclass
class CmdArgs:
    """Arguments a plugin command is invoked with."""

    container_id: str = ""
    netns: str = ""
    if_name: str = ""
    args: str = ""
    path: str = ""
    stdin_data: bytes = b""


@dataclass
class IPAMConf:
    """The IPAM section of a network configuration."""

    type: str = ""


@dataclass
class NetConf:
    """Parameters needed to set up a bridge and attach a container to it."""

    bridge_name: str
    mtu: int = DEFAULT_MTU
    ipam: IPAMConf = field(default_factory=IPAMConf)
    cni_version: str = ""
    name: str = ""
    type: str = ""


@dataclass
class Link:
    """A network link (device) as seen by the kernel."""

    name: str = ""
    mtu: int = 0
    hardware_addr: str = ""
    link_type: str = "device"
    tx_queue_len: int = -1


@dataclass
class Addr:
    """An address assigned to a link."""

    ip_net: IPInterface | None = None


@dataclass
class Route:
    """A route, optionally through a gateway."""

    dst: IPNetwork | None = None
    gw: IPAddress | None = None
    src: IPAddress | None = None

    def _as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"dst": str(self.dst) if self.dst is not None else ""}
        if self.gw is not None:
            out["gw"] = str(self.gw)
        return out


@dataclass
class Interface:
    """An interface reported in a plugin result."""

    name: str = ""
    mac: str = ""
    sandbox: str = ""

    def _as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.mac:
            out["mac"] = self.mac
        if self.sandbox:
            out["sandbox"] = self.sandbox
        return out


@dataclass
class IPConfig:
    """An IP address allocated to an interface."""

    version: str = "4"
    interface: int | None = None
    address: IPInterface | None = None
    gateway: IPAddress | None = None

    def _as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"version": self.version}
        if self.interface is not None:
            out["interface"] = self.interface
        if self.address is not None:
            out["address"] = str(self.address)
        if self.gateway is not None:
            out["gateway"] = str(self.gateway)
        return out


@dataclass
class Result:
    """The outcome of an ADD command."""

    cni_version: str = "0.3.0"
    interfaces: list[Interface] = field(default_factory=list)
    ips: list[IPConfig] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)
    dns: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Return the result as indented JSON."""
        out: dict[str, Any] = {}
        if self.cni_version:
            out["cniVersion"] = self.cni_version
        if self.interfaces:
            out["interfaces"] = [iface._as_dict() for iface in self.interfaces]
        if self.ips:
            out["ips"] = [ip._as_dict() for ip in self.ips]
        if self.routes:
            out["routes"] = [route._as_dict() for route in self.routes]
        out["dns"] = dict(self.dns)
        return json.dumps(out, indent=4)

    def print(self, file: TextIO | None = None) -> None:
        """Write the result as JSON to ``file`` (standard output by default)."""
        stream = sys.stdout if file is None else file
        stream.write(self.to_json())


def _field(raw: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = raw.get(key)
    if value is None:
        return default
    if kind is int and isinstance(value, bool):
        raise ValueError(f"field '{key}' must be an integer")
    if not isinstance(value, kind):
        raise ValueError(f"field '{key}' must be of type {kind.__name__}")
    return value


def new_conf(args: CmdArgs) -> NetConf:
    """Parse the network configuration passed on standard input."""
    prefix = "bridge parsing config: failed to parse config"
    try:
        raw = json.loads(args.stdin_data)
        if not isinstance(raw, dict):
            raise ValueError("expected a JSON object")
        ipam_raw = raw.get("ipam")
        if ipam_raw is None:
            ipam_raw = {}
        if not isinstance(ipam_raw, dict):
            raise ValueError("field 'ipam' must be an object")
        conf = NetConf(
            bridge_name=_field(raw, "bridge", str, ""),
            mtu=_field(raw, "mtu", int, 0),
            ipam=IPAMConf(type=_field(ipam_raw, "type", str, "")),
            cni_version=_field(raw, "cniVersion", str, ""),
            name=_field(raw, "name", str, ""),
            type=_field(raw, "type", str, ""),
        )
    except ValueError as err:
        raise ValueError(f"{prefix}: {err}") from err

    if not conf.bridge_name:
        raise ValueError(
            "bridge parsing config: missing required parameter in config named: 'bridge'"
        )
    if conf.mtu == 0:
        conf.mtu = DEFAULT_MTU
    _log.debug("Loaded config: %r", conf)
    return conf