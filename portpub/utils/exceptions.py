"""
Errors raised while parsing publish specifications and ports labels.

Every error subclasses ``PortSpecError`` (itself a ``ValueError``) and carries
a ``kind`` tag so callers can branch on a single attribute instead of
catching each class separately.
"""

PUBLISH_FORMAT_HINT = (
    "Format should be [HOSTIP:]HOSTPORT[-HOSTPORT2][:CONTAINERPORT[-CONTAINERPORT2]][/PROTO] "
    "(e.g., 8080:80, 127.0.0.1:3000-3001:8080-8081/tcp or [::1]:53:53/udp)."
)


class PortSpecError(ValueError):
    """Base exception for port specification errors."""

    kind = 'error'

    def __init__(self, message, spec=None):
        self.spec = spec
        self.reason = message
        if spec is not None:
            message = f"Invalid port specification: {spec!r}. {message}"
        super().__init__(message)


class PortSpecSyntaxError(PortSpecError):
    """Wrong number of colon/slash separated fields, or empty input."""

    kind = 'syntax'

    def __init__(self, message, spec=None):
        super().__init__(f"{message}. {PUBLISH_FORMAT_HINT}", spec)


class InvalidProtocolError(PortSpecError):
    kind = 'invalid_protocol'


class InvalidIPError(PortSpecError):
    kind = 'invalid_ip'


class PortOutOfRangeError(PortSpecError):
    kind = 'port_out_of_range'


class RangeMismatchError(PortSpecError):
    """Host and container port ranges cover a different number of ports."""

    kind = 'range_mismatch'


class RangeTooLargeError(PortSpecError):
    """An auto-assigned host port range exceeds the configured maximum."""

    kind = 'range_too_large'


class MalformedLabelError(PortSpecError):
    """Stored ports label is not a JSON array of port mapping records."""

    kind = 'malformed_label'

    def __init__(self, message, label_key=None):
        self.label_key = label_key
        if label_key is not None:
            message = f"Invalid ports label {label_key!r}: {message}"
        super().__init__(message)
