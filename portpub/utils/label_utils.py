"""
Ports label encoding and decoding.

Published ports are persisted with a container's metadata as a JSON array
stored under a well-known label key, so they can be reconstructed later
without parsing the -p values again.
"""

import json
import logging

from portpub.utils.exceptions import MalformedLabelError
from portpub.utils.port_utils import LABEL_FIELDS, PortMapping

logger = logging.getLogger(__name__)

PORTS_LABEL = 'portpub/ports'

_FIELD_TYPES = {
    'HostPort': int,
    'ContainerPort': int,
    'Protocol': str,
    'HostIP': str,
}


def encode_ports_label(mappings):
    """
    Encode port mappings as a compact JSON array.

    Example:
        >>> encode_ports_label([PortMapping(12345, 10000)])
        '[{"HostPort":12345,"ContainerPort":10000,"Protocol":"tcp","HostIP":"0.0.0.0"}]'
    """
    return json.dumps([m.to_dict() for m in mappings], separators=(',', ':'))


def ports_label(mappings, label_key=PORTS_LABEL):
    """Return a single-entry label map ready to merge into container labels."""
    return {label_key: encode_ports_label(mappings)}


def _check_record(record, index, label_key):
    if not isinstance(record, dict):
        raise MalformedLabelError(
            f"entry {index} must be a JSON object, got {type(record).__name__}", label_key
        )

    for field in LABEL_FIELDS:
        if field not in record:
            raise MalformedLabelError(f"entry {index} is missing {field!r}", label_key)
        value = record[field]
        expected = _FIELD_TYPES[field]
        # bool is an int subclass but JSON true/false is never a port
        if not isinstance(value, expected) or isinstance(value, bool):
            raise MalformedLabelError(
                f"entry {index} field {field!r} must be {expected.__name__}, got {value!r}", label_key
            )

    extra = set(record) - set(LABEL_FIELDS)
    if extra:
        logger.debug("Ignoring unknown fields %s in entry %d of %s", sorted(extra), index, label_key)


def parse_ports_label(labels, label_key=PORTS_LABEL):
    """
    Decode port mappings from a container's labels.

    A missing key or an empty value means the container publishes no ports.
    Records are returned as stored; port ranges and protocols are not
    validated again.

    Args:
        labels (dict): Container label map
        label_key (str): Key holding the encoded ports

    Returns:
        list: List of PortMapping

    Raises:
        MalformedLabelError: If the value is not a JSON array of port records
    """
    value = labels.get(label_key, '')
    if not value:
        return []

    try:
        records = json.loads(value)
    except json.JSONDecodeError as e:
        raise MalformedLabelError(f"not valid JSON: {e}", label_key) from e

    if not isinstance(records, list):
        raise MalformedLabelError(
            f"expected a JSON array, got {type(records).__name__}", label_key
        )

    mappings = []
    for index, record in enumerate(records):
        _check_record(record, index, label_key)
        mappings.append(PortMapping.from_dict(record))

    return mappings
