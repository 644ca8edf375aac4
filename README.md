# ecsbridge

The command flow of a container bridge network plugin: create (or reuse) a
bridge, wire a veth pair between a container's network namespace and that
bridge, hand address allocation to an IPAM plugin, configure the container
end of the pair and the bridge's own address, and tear it down again on
delete.

Every system-facing operation (links, addresses, routes, namespaces, IPAM)
is reached through objects you pass in, so the whole flow can be driven and
tested without touching the host network.

## Modules

- `ecsbridge.commands` – `add(args, engine)` and `delete(args, engine)`,
  the helper `detail_log_msg(msg, args, conf, host_veth_name)` that builds
  the structured log lines, and `spec_versions_supported()`, which returns
  `("0.3.0",)`.
- `ecsbridge.engine` – `Engine`, which performs each step:
  `create_bridge`, `create_veth_pair`, `attach_host_veth_interface_to_bridge`,
  `run_ipam_plugin_add`, `configure_container_veth_interface`,
  `configure_bridge`, `get_interface_ipv4_address`, `run_ipam_plugin_del`
  and `delete_veth`. Failures raise `EngineError`.
- `ecsbridge.contexts` – the work done inside the container namespace:
  `CreateVethPairContext`, `ConfigureVethContext`, `DeleteLinkContext` and
  `GetContainerIPV4Context`, plus `LinkNotFoundError`.
- `ecsbridge.types` – `CmdArgs`, the network configuration `NetConf`
  (parsed by `new_conf`) with its `IPAMConf`, and the data model `Link`,
  `Addr`, `Route`, `Interface`, `IPConfig` and `Result`
  (`Result.to_json()`, `Result.print(file)`).
- `ecsbridge.gateway` – `compute_ipv4_gateway_netmask` and
  `parse_ipv4_gateway_netmask`, with `ParseIPV4GatewayNetmaskError`.
- `ecsbridge.backoff` – `SimpleBackoff` (durations in seconds) and
  `add_jitter`.
- `ecsbridge.utils` – `zero_or_nil`, `retry_with_backoff` and
  `retry_with_backoff_ctx`.
- `ecsbridge.errors` – `Retriable` and `RetriableError`.
- `ecsbridge.version` – `version_string` and the `COMMAND` name `"version"`.
- `ecsbridge.osutil` – `OS` (`find_process`, `getenv`) and `OSProcess`
  (`signal`).

## The objects the engine expects

`Engine(net_link=..., ns=..., ip=..., ipam=...)` calls these methods on
what it is given:

- `net_link`: `link_by_name`, `link_add`, `link_set_up`, `link_set_master`,
  `addr_list`, `addr_add`, `route_list`, `route_del`. A missing link is
  signalled by raising `LinkNotFoundError`; a bridge is a `Link` whose
  `link_type` is `"bridge"`.
- `ns`: `with_netns_path(path, fn)`, which must call `fn(host_ns)` inside
  the named namespace.
- `ip`: `setup_veth(name, mtu, host_ns)` returning the host and container
  ends (objects with `name` and `hardware_addr`), `set_hw_addr_by_ip`,
  `del_link_by_name_addr`.
- `ipam`: `exec_add` returning a `Result`, `exec_del`, `configure_iface`.

An error whose text contains "file exists" when adding the bridge or its
address is taken to mean someone else did it first, and is not an error.

## Examples

Parsing the network configuration:

```python
from ecsbridge.types import CmdArgs, new_conf

conf = new_conf(CmdArgs(stdin_data=b'{"bridge": "br0", "ipam": {"type": "ecs-ipam"}}'))
conf.bridge_name   # "br0"
conf.mtu           # 1500, the default when "mtu" is absent or 0
conf.ipam.type     # "ecs-ipam"
```

A missing or empty `"bridge"`, or input that is not a JSON object, raises
`ValueError`.

Gateway and netmask for a subnet (block sizes from /16 to /28 are accepted):

```python
from ecsbridge.gateway import compute_ipv4_gateway_netmask, parse_ipv4_gateway_netmask

compute_ipv4_gateway_netmask("10.0.1.64/26")   # ("10.0.1.65", "26")
parse_ipv4_gateway_netmask("10.0.1.64/26")     # ("10.0.1.64", "26")
```

Text that is not a CIDR block, or a block size outside that range, raises
`ValueError`; a block with no IPv4 address raises
`ParseIPV4GatewayNetmaskError` from the compute function.

Version information:

```python
from ecsbridge.version import version_string

version_string("0.1.0", "0", "abcd")
# '{"version":"0.1.0","dirty":false,"gitShortHash":"abcd"}'
```

The build is reported dirty unless the porcelain count is exactly `"0"`
after trimming.

Retrying with backoff:

```python
from ecsbridge.backoff import SimpleBackoff
from ecsbridge.utils import retry_with_backoff

backoff = SimpleBackoff(0.01, 1.0, 0.0, 2.0)
value = retry_with_backoff(backoff, fetch)
```

`fetch` is called until it returns; an exception with a `retry()` method
returning False (such as a `RetriableError`) is re-raised at once.
`retry_with_backoff_ctx` takes a `threading.Event` as well and raises
`concurrent.futures.CancelledError` once it is set.

Checking for empty values, as the delete flow does before calling IPAM:

```python
from ecsbridge.utils import zero_or_nil

zero_or_nil(None)        # True
zero_or_nil({})          # True
zero_or_nil({"a": "b"})  # False
```

## The command flows

`add` parses the configuration, creates the bridge, creates the veth pair,
attaches its host end to the bridge, runs IPAM ADD, records the bridge, the
host end and the container end as the result's interfaces (the IP config
points at index 2), configures the container interface and the bridge,
then prints the result as JSON to standard output and returns it.

`delete` parses the configuration, runs IPAM DEL when an IPAM type is
configured (a failure there is logged and the deletion goes on), and
deletes the container's veth interface; a link that is already gone is not
an error.

Both log through the standard `logging` module and re-raise any failure.

## What the package does not do

- It has no command-line entry point: there is no executable that reads the
  plugin environment and standard input, and no `--version` or capabilities
  flag handling. `add` and `delete` are called from Python.
- It contains no netlink, namespace or IPAM implementation. The objects
  described above must be supplied; without them `Engine` cannot touch a
  real network.

## Running the tests

The test suite uses pytest, available through the `test` extra:

```
pip install -e .[test]
pytest
```