"""
portpub: parse and persist container port publish specifications.

Turns -p/--publish values such as "127.0.0.1:3000-3001:8080-8081/tcp" into
validated port mappings, and stores/restores them as a container label.
"""

__version__ = '0.1.0'

from portpub.utils.exceptions import (
    PortSpecError,
    PortSpecSyntaxError,
    InvalidProtocolError,
    InvalidIPError,
    PortOutOfRangeError,
    RangeMismatchError,
    RangeTooLargeError,
    MalformedLabelError,
)
from portpub.utils.port_utils import PortMapping, parse_flag_p, parse_publish_flags
from portpub.utils.label_utils import PORTS_LABEL, encode_ports_label, parse_ports_label

__all__ = [
    'PortMapping',
    'parse_flag_p',
    'parse_publish_flags',
    'PORTS_LABEL',
    'encode_ports_label',
    'parse_ports_label',
    'PortSpecError',
    'PortSpecSyntaxError',
    'InvalidProtocolError',
    'InvalidIPError',
    'PortOutOfRangeError',
    'RangeMismatchError',
    'RangeTooLargeError',
    'MalformedLabelError',
]
