"""The ADD and DEL commands of the bridge plugin."""

from __future__ import annotations

import logging
from typing import Any

from .types import CmdArgs, Interface, NetConf, Result, new_conf
from .utils import zero_or_nil

_log = logging.getLogger(__name__)

_SPEC_VERSIONS_SUPPORTED = ("0.3.0",)


def spec_versions_supported() -> tuple[str, ...]:
    """Return the CNI specification versions the plugin supports."""
    return _SPEC_VERSIONS_SUPPORTED


def detail_log_msg(
    msg: str, args: CmdArgs, conf: NetConf | None, host_veth_name: str
) -> str:
    """Return ``msg`` decorated with the details of the invocation."""
    ipam_type = conf.ipam.type if conf is not None else ""
    bridge_name = conf.bridge_name if conf is not None else ""
    out = (
        f'msg="{msg}" netns={args.netns} ifname={args.if_name} '
        f"containerID={args.container_id}"
    )
    if bridge_name:
        out += " bridgeName=" + bridge_name
    if ipam_type:
        out += " ipamType=" + ipam_type
    if host_veth_name:
        out += " hostVethName=" + host_veth_name
    return out


def _info(msg: str, args: CmdArgs, conf: NetConf | None, host_veth_name: str = "") -> None:
    _log.info(detail_log_msg(msg, args, conf, host_veth_name))


def _error(msg: str, args: CmdArgs, conf: NetConf | None, host_veth_name: str = "") -> None:
    _log.error(detail_log_msg(msg, args, conf, host_veth_name))


def add(args: CmdArgs, engine: Any) -> Result:
    """Create the bridge and the veth pair joining the container to it.

    The resulting configuration is printed to standard output and returned.
    """
    try:
        return _add(args, engine)
    except Exception as err:
        _error(f"Error executing ADD command: {err}", args, None)
        raise


def _add(args: CmdArgs, engine: Any) -> Result:
    conf = new_conf(args)

    _info("Creating the bridge", args, conf)
    bridge = engine.create_bridge(conf.bridge_name, conf.mtu)

    _info("Creating veth pair for namespace", args, conf)
    container_veth, host_veth_name = engine.create_veth_pair(
        args.netns, conf.mtu, args.if_name
    )

    _info("Attaching veth pair to bridge", args, conf, host_veth_name)
    host_veth = engine.attach_host_veth_interface_to_bridge(host_veth_name, bridge)

    _info("Running IPAM plugin ADD", args, conf, host_veth_name)
    result = engine.run_ipam_plugin_add(conf.ipam.type, args.stdin_data)

    # The bridge, the host end and the container end of the veth pair.
    result.interfaces = [
        Interface(name=bridge.name, mac=bridge.hardware_addr),
        host_veth,
        container_veth,
    ]
    # Routes are added through the container end, at index 2.
    result.ips[0].interface = 2

    _info("Configuring container's interface", args, conf, host_veth_name)
    engine.configure_container_veth_interface(args.netns, result, args.if_name)

    _info("Configuring bridge", args, conf, host_veth_name)
    engine.configure_bridge(result, bridge)

    result.print()
    return result


def delete(args: CmdArgs, engine: Any) -> None:
    """Release the IPAM allocation and delete the container's veth interface.

    A failure of the IPAM plugin is logged and does not stop the deletion.
    """
    try:
        _delete(args, engine)
    except Exception as err:
        _error(f"Error executing DEL command: {err}", args, None)
        raise


def _delete(args: CmdArgs, engine: Any) -> None:
    conf = new_conf(args)
    _info("Deleting veth interface", args, conf)

    if zero_or_nil(conf.ipam):
        _info("IPAM configuration not found, skip DEL for IPAM", args, conf)
    else:
        _info("Running IPAM plugin DEL", args, conf)
        try:
            engine.run_ipam_plugin_del(conf.ipam.type, args.stdin_data)
        except Exception as err:
            _error(f"Error running IPAM plugin DEL: {err}", args, conf)

    _info("Deleting container interface", args, conf)
    engine.delete_veth(args.netns, args.if_name)