"""Utilities for handling port publish specifications and validation."""

import ipaddress
import logging
import os
import re
from collections import namedtuple
from dataclasses import dataclass

from portpub.utils.exceptions import (
    InvalidIPError,
    InvalidProtocolError,
    PortOutOfRangeError,
    PortSpecSyntaxError,
    RangeMismatchError,
    RangeTooLargeError,
)

logger = logging.getLogger(__name__)

MIN_PORT = 0
MAX_PORT = 65535
PROTOCOLS = ('tcp', 'udp', 'sctp')
DEFAULT_PROTOCOL = 'tcp'
DEFAULT_HOST_IP = '0.0.0.0'

# Host port value meaning "allocate at realisation time"
AUTO_HOST_PORT = 0

DEFAULT_MAX_AUTO_PORT_RANGE = 5000
MAX_AUTO_PORT_RANGE_ENV = 'PORTPUB_MAX_AUTO_PORT_RANGE'

LABEL_FIELDS = ('HostPort', 'ContainerPort', 'Protocol', 'HostIP')

_PORT_RE = re.compile(r'[0-9]+')

SplitSpec = namedtuple(
    'SplitSpec',
    ['host_ip', 'bracketed', 'host_ports', 'container_ports', 'protocol']
)


@dataclass(frozen=True, order=True)
class PortMapping:
    """
    A single published port.

    Field order makes ``sorted()`` order mappings by host port first.
    A ``host_port`` of ``AUTO_HOST_PORT`` means the host port is left to an
    external allocator. An explicit "0" host port in a -p value means the
    same thing, so the two are not distinguished.
    """

    host_port: int
    container_port: int
    protocol: str = DEFAULT_PROTOCOL
    host_ip: str = DEFAULT_HOST_IP

    @property
    def auto_host_port(self):
        return self.host_port == AUTO_HOST_PORT

    def to_dict(self):
        """Return the record using the persisted label field names."""
        return dict(zip(LABEL_FIELDS, (self.host_port, self.container_port, self.protocol, self.host_ip)))

    @classmethod
    def from_dict(cls, record):
        """Build a mapping from a record using the persisted label field names."""
        host_port, container_port, protocol, host_ip = (record[field] for field in LABEL_FIELDS)
        return cls(
            host_port=host_port,
            container_port=container_port,
            protocol=protocol,
            host_ip=host_ip
        )


def get_max_auto_port_range():
    """
    Maximum number of ports an auto-assigned publish range may cover.

    Reads PORTPUB_MAX_AUTO_PORT_RANGE, falling back to DEFAULT_MAX_AUTO_PORT_RANGE.

    Raises:
        ValueError: If the environment value is not a positive integer
    """
    value = os.environ.get(MAX_AUTO_PORT_RANGE_ENV)
    if not value:
        return DEFAULT_MAX_AUTO_PORT_RANGE

    try:
        limit = int(value)
    except ValueError:
        raise ValueError(f"{MAX_AUTO_PORT_RANGE_ENV} must be an integer, got {value!r}") from None

    if limit < 1:
        raise ValueError(f"{MAX_AUTO_PORT_RANGE_ENV} must be a positive integer, got {limit}")

    return limit


def validate_port(port, spec=None):
    """
    Validate port number.

    Args:
        port (int): Port number
        spec (str): Specification the port came from, used in error messages

    Returns:
        bool: True if valid

    Raises:
        PortSpecSyntaxError: If port is not an integer
        PortOutOfRangeError: If port is outside 0-65535
    """
    if not isinstance(port, int) or isinstance(port, bool):
        raise PortSpecSyntaxError(f"Port must be an integer, got {type(port).__name__}", spec)

    if port < MIN_PORT or port > MAX_PORT:
        raise PortOutOfRangeError(f"Port must be between {MIN_PORT} and {MAX_PORT}, got {port}", spec)

    return True


def validate_protocol(protocol, spec=None):
    """
    Validate protocol.

    Unlike host addresses, protocol names are matched exactly as written.

    Returns:
        bool: True if valid

    Raises:
        InvalidProtocolError: If protocol is not tcp, udp or sctp
    """
    if protocol not in PROTOCOLS:
        raise InvalidProtocolError(
            f"Protocol must be one of {', '.join(PROTOCOLS)}, got {protocol!r}", spec
        )

    return True


def validate_host_ip(host_ip, bracketed=False, spec=None):
    """
    Validate a host IP literal.

    Bracketed literals must be IPv6 addresses; bare literals must be dotted
    decimal IPv4 addresses.

    Returns:
        bool: True if valid

    Raises:
        InvalidIPError: If the literal does not parse
    """
    family = 'IPv6' if bracketed else 'IPv4'
    try:
        if bracketed:
            ipaddress.IPv6Address(host_ip)
        else:
            ipaddress.IPv4Address(host_ip)
    except ValueError as e:
        raise InvalidIPError(f"Invalid {family} host address {host_ip!r}: {e}", spec) from e

    return True


def parse_port_range(text, spec=None):
    """
    Parse a single port or a port range.

    Args:
        text (str): String like "8080" or "8080-8090"

    Returns:
        tuple: (start, end), equal for a single port

    Example:
        >>> parse_port_range("8080")
        (8080, 8080)
        >>> parse_port_range("3000-3001")
        (3000, 3001)
    """
    bounds = text.split('-')
    if len(bounds) > 2:
        raise PortSpecSyntaxError(f"Invalid port range {text!r}", spec)

    ports = []
    for bound in bounds:
        if not _PORT_RE.fullmatch(bound):
            raise PortSpecSyntaxError(f"Invalid port {bound!r} in {text!r}", spec)
        # int() refuses very long digit strings; no port needs more than 5 digits
        if len(bound.lstrip('0')) > len(str(MAX_PORT)):
            raise PortOutOfRangeError(
                f"Port must be between {MIN_PORT} and {MAX_PORT}, got {bound[:10]}... ({len(bound)} digits)", spec
            )
        port = int(bound)
        validate_port(port, spec)
        ports.append(port)

    start, end = ports[0], ports[-1]
    if end < start:
        raise PortSpecSyntaxError(
            f"Invalid port range: start port ({start}) must not be greater than end port ({end})", spec
        )

    return start, end


def split_port_spec(spec):
    """
    Split a publish specification into its syntactic fields.

    The layout is chosen by counting colon separated segments:
    CONTAINER, HOST:CONTAINER or IP:HOST:CONTAINER. A leading '[' starts a
    bracketed IPv6 host address. An empty host port field ("127.0.0.1::80")
    leaves the host port to auto-assignment.

    Returns:
        SplitSpec: host_ip and host_ports are None when absent
    """
    if not spec:
        raise PortSpecSyntaxError("No port specification given", spec)

    slash_parts = spec.split('/')
    if len(slash_parts) > 2:
        raise PortSpecSyntaxError("Too many '/' separated fields", spec)
    address = slash_parts[0]
    protocol = slash_parts[1] if len(slash_parts) == 2 else None

    host_ip = None
    bracketed = address.startswith('[')
    if bracketed:
        closing = address.find(']')
        if closing == -1:
            raise InvalidIPError("Unterminated '[' in IPv6 host address", spec)
        host_ip = address[1:closing]
        rest = address[closing + 1:]
        if not rest.startswith(':'):
            raise PortSpecSyntaxError("Expected ':' after bracketed host address", spec)
        fields = rest[1:].split(':')
        if len(fields) > 2:
            raise PortSpecSyntaxError("Too many ':' separated fields", spec)
    else:
        fields = address.split(':')
        if len(fields) > 3:
            raise PortSpecSyntaxError("Too many ':' separated fields", spec)
        if len(fields) == 3:
            host_ip = fields.pop(0)
            if not host_ip:
                raise PortSpecSyntaxError("Empty host IP field", spec)

    if len(fields) == 1:
        host_ports = None
        container_ports = fields[0]
    else:
        host_ports, container_ports = fields
        host_ports = host_ports or None

    if not container_ports:
        raise PortSpecSyntaxError("Missing container port", spec)

    return SplitSpec(host_ip, bracketed, host_ports, container_ports, protocol)


def expand_port_range(host_range, container_range, host_ip=DEFAULT_HOST_IP,
                      protocol=DEFAULT_PROTOCOL, max_auto_range=None, spec=None):
    """
    Expand host and container port ranges into aligned port mappings.

    Args:
        host_range (tuple): (start, end) host ports, or None to auto-assign
        container_range (tuple): (start, end) container ports
        max_auto_range (int): Cap on auto-assigned ranges, defaults to
            get_max_auto_port_range()

    Returns:
        list: PortMapping per offset in the range

    Raises:
        RangeTooLargeError: If an auto-assigned range exceeds the cap
        RangeMismatchError: If host and container ranges differ in length
    """
    container_start, container_end = container_range

    if host_range is None:
        limit = max_auto_range if max_auto_range is not None else get_max_auto_port_range()
        range_size = container_end - container_start + 1
        if range_size > limit:
            raise RangeTooLargeError(
                f"Port range too large ({range_size} ports). "
                f"Maximum allowed with auto-assigned host ports is {limit} ports.", spec
            )
        return [
            PortMapping(AUTO_HOST_PORT, port, protocol, host_ip)
            for port in range(container_start, container_end + 1)
        ]

    host_start, host_end = host_range
    host_span = host_end - host_start
    container_span = container_end - container_start
    if host_span != container_span:
        raise RangeMismatchError(
            f"Host port range {host_start}-{host_end} ({host_span + 1} ports) does not match "
            f"container port range {container_start}-{container_end} ({container_span + 1} ports)", spec
        )

    return [
        PortMapping(host_start + offset, container_start + offset, protocol, host_ip)
        for offset in range(host_span + 1)
    ]


def parse_flag_p(spec, max_auto_range=None):
    """
    Parse a -p/--publish value, including support for port ranges.

    Args:
        spec (str): String like "8080:80", "127.0.0.1:3000-3001:8080-8081/tcp",
            "[::1]:53:53/udp" or "3000" (auto-assigned host port)
        max_auto_range (int): Cap on auto-assigned ranges

    Returns:
        list: List of PortMapping

    Raises:
        PortSpecError: Exactly one error kind describing the first problem found

    Example:
        >>> parse_flag_p("3000:8080/tcp")
        [PortMapping(host_port=3000, container_port=8080, protocol='tcp', host_ip='0.0.0.0')]
    """
    parts = split_port_spec(spec)

    protocol = DEFAULT_PROTOCOL if parts.protocol is None else parts.protocol
    validate_protocol(protocol, spec)

    host_ip = DEFAULT_HOST_IP
    if parts.host_ip is not None:
        validate_host_ip(parts.host_ip, parts.bracketed, spec)
        host_ip = parts.host_ip

    host_range = None
    if parts.host_ports is not None:
        host_range = parse_port_range(parts.host_ports, spec)
    container_range = parse_port_range(parts.container_ports, spec)

    mappings = expand_port_range(
        host_range, container_range, host_ip, protocol,
        max_auto_range=max_auto_range, spec=spec
    )
    logger.debug("Parsed %r into %d port mapping(s)", spec, len(mappings))
    return mappings


def parse_publish_flags(specs, max_auto_range=None):
    """
    Parse every value of a repeated -p/--publish option.

    Stops at the first invalid specification.
    """
    result = []
    for spec in specs:
        result.extend(parse_flag_p(spec, max_auto_range=max_auto_range))
    return result


def format_port_mapping(mapping):
    """
    Format a port mapping for display.

    Example:
        >>> format_port_mapping(PortMapping(8080, 80))
        "0.0.0.0:8080->80/tcp"
    """
    container = f"{mapping.container_port}/{mapping.protocol}"
    if mapping.auto_host_port:
        return container

    host_ip = f"[{mapping.host_ip}]" if ':' in mapping.host_ip else mapping.host_ip
    return f"{host_ip}:{mapping.host_port}->{container}"


def format_port_list(mappings):
    """
    Format list of port mappings for display.

    Returns:
        str: Formatted string like "0.0.0.0:8080->80/tcp, 53/udp"
    """
    return ', '.join([format_port_mapping(m) for m in mappings])
