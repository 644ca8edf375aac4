import io
import ipaddress
import json

import pytest

from ecsbridge.types import (
    Addr,
    CmdArgs,
    Interface,
    IPAMConf,
    IPConfig,
    Link,
    NetConf,
    Result,
    Route,
    new_conf,
)


@pytest.mark.parametrize(
    "raw",
    ["", "{}", '{"mtu":9100}', '{"bridge":"","mtu":9100}'],
    ids=["empty", "empty-json", "no-bridge", "empty-bridge"],
)
def test_new_conf_errors(raw):
    with pytest.raises(ValueError, match="bridge parsing config"):
        new_conf(CmdArgs(stdin_data=raw.encode()))


@pytest.mark.parametrize(
    "raw,bridge,mtu",
    [
        ('{"bridge":"br0","mtu":9100}', "br0", 9100),
        ('{"bridge":"br0"}', "br0", 1500),
    ],
)
def test_new_conf_valid(raw, bridge, mtu):
    conf = new_conf(CmdArgs(stdin_data=raw.encode()))
    assert conf.bridge_name == bridge
    assert conf.mtu == mtu


def test_new_conf_reads_ipam_type():
    conf = new_conf(
        CmdArgs(stdin_data=b'{"bridge":"ecs-br0", "ipam":{"type": "ecs-ipam"}}')
    )
    assert conf.ipam == IPAMConf(type="ecs-ipam")


def test_new_conf_without_ipam_has_empty_ipam():
    conf = new_conf(CmdArgs(stdin_data=b'{"bridge":"br0"}'))
    assert conf.ipam.type == ""


def test_new_conf_missing_bridge_message():
    with pytest.raises(ValueError, match="named: 'bridge'"):
        new_conf(CmdArgs(stdin_data=b'{"mtu":9100}'))


@pytest.mark.parametrize(
    "raw",
    ['{"bridge":1}', '{"bridge":"br0","mtu":"big"}', '{"bridge":"br0","mtu":true}',
     '[1,2]', '{"bridge":"br0","ipam":[]}'],
)
def test_new_conf_rejects_wrong_types(raw):
    with pytest.raises(ValueError, match="failed to parse config"):
        new_conf(CmdArgs(stdin_data=raw.encode()))


def test_net_conf_fields():
    conf = NetConf(bridge_name="br0")
    assert (conf.mtu, conf.ipam.type) == (1500, "")


def test_result_to_json_round_trip():
    result = Result(
        interfaces=[
            Interface(name="ecs-br0", mac="02:00:00:00:00:aa"),
            Interface(name="veth1"),
        ],
        ips=[
            IPConfig(
                interface=1,
                address=ipaddress.ip_interface("169.254.172.2/22"),
                gateway=ipaddress.ip_address("169.254.172.1"),
            )
        ],
        routes=[
            Route(
                dst=ipaddress.ip_network("169.254.170.2/32"),
                gw=ipaddress.ip_address("169.254.172.1"),
            ),
            Route(dst=ipaddress.ip_network("10.0.0.0/8")),
        ],
    )
    data = json.loads(result.to_json())
    assert data == {
        "cniVersion": "0.3.0",
        "interfaces": [
            {"name": "ecs-br0", "mac": "02:00:00:00:00:aa"},
            {"name": "veth1"},
        ],
        "ips": [
            {
                "version": "4",
                "interface": 1,
                "address": "169.254.172.2/22",
                "gateway": "169.254.172.1",
            }
        ],
        "routes": [
            {"dst": "169.254.170.2/32", "gw": "169.254.172.1"},
            {"dst": "10.0.0.0/8"},
        ],
        "dns": {},
    }


def test_empty_result_omits_lists():
    data = json.loads(Result().to_json())
    assert data == {"cniVersion": "0.3.0", "dns": {}}


def test_result_print_writes_json():
    buf = io.StringIO()
    result = Result(interfaces=[Interface(name="eth0")])
    result.print(buf)
    assert buf.getvalue() == result.to_json()
    assert json.loads(buf.getvalue())["interfaces"] == [{"name": "eth0"}]


def test_link_and_addr_values():
    link = Link(name="br0", mtu=9100, link_type="bridge")
    addr = Addr(ip_net=ipaddress.ip_interface("192.168.1.1/31"))
    assert link.tx_queue_len == -1
    assert str(addr.ip_net) == "192.168.1.1/31"