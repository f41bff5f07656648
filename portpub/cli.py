"""
Command-line interface for portpub.

Parses -p/--publish values and ports labels, printing the resulting
port mappings as text, JSON or an encoded label value.
"""

import argparse
import json
import logging
import sys

from huepy import good, bad, info, bold

from portpub import __version__
from portpub.utils.exceptions import MalformedLabelError, PortSpecError
from portpub.utils.label_utils import PORTS_LABEL, encode_ports_label, parse_ports_label
from portpub.utils.port_utils import (
    format_port_list,
    format_port_mapping,
    get_max_auto_port_range,
    parse_publish_flags,
)


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


def format_output(data, pretty=True):
    """
    Format output data as JSON.

    Args:
        data: Data to format
        pretty: Whether to use pretty printing (default: True)

    Returns:
        JSON string
    """
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)


def create_parser():
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='portpub',
        description='Parse container port publish specifications and ports labels',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'portpub {__version__}'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='subcommand', help='Subcommands')

    # Parse subcommand
    parse_parser = subparsers.add_parser(
        'parse',
        help='Parse -p/--publish values into port mappings'
    )
    parse_parser.add_argument(
        '-p', '--publish',
        dest='publish',
        action='append',
        required=True,
        help='Publish spec, [HOSTIP:]HOSTPORT[-HOSTPORT2][:CONTAINERPORT[-CONTAINERPORT2]][/PROTO] '
             '(can be specified multiple times)'
    )
    parse_parser.add_argument(
        '--format',
        dest='output_format',
        choices=['txt', 'json', 'label'],
        default='txt',
        help='Output format (default: txt). "label" prints the encoded ports label value'
    )
    parse_parser.add_argument(
        '--max-auto-range',
        dest='max_auto_range',
        type=positive_int,
        help='Maximum ports in a range with auto-assigned host ports '
             '(default: PORTPUB_MAX_AUTO_PORT_RANGE or 5000)'
    )

    # Decode subcommand
    decode_parser = subparsers.add_parser(
        'decode',
        help='Decode a stored ports label'
    )
    decode_parser.add_argument(
        'value',
        nargs='?',
        default='',
        help='Encoded ports label value (JSON array)'
    )
    decode_parser.add_argument(
        '--labels-file',
        dest='labels_file',
        help='JSON file holding a container label map to read the ports label from'
    )
    decode_parser.add_argument(
        '--label-key',
        dest='label_key',
        default=PORTS_LABEL,
        help=f'Label key holding the ports (default: {PORTS_LABEL})'
    )
    decode_parser.add_argument(
        '--format',
        dest='output_format',
        choices=['txt', 'json'],
        default='txt',
        help='Output format (default: txt)'
    )

    # Format subcommand
    format_parser = subparsers.add_parser(
        'format',
        help='Print -p/--publish values as a single ps-style ports column'
    )
    format_parser.add_argument(
        '-p', '--publish',
        dest='publish',
        action='append',
        required=True,
        help='Publish spec (can be specified multiple times)'
    )
    format_parser.add_argument(
        '--max-auto-range',
        dest='max_auto_range',
        type=positive_int,
        help='Maximum ports in a range with auto-assigned host ports'
    )

    return parser


def print_mappings(mappings, output_format='txt'):
    if output_format == 'json':
        print(format_output([m.to_dict() for m in mappings]))
        return
    if output_format == 'label':
        print(encode_ports_label(mappings))
        return

    if not mappings:
        print(info('No published ports.'))
        return
    for mapping in mappings:
        print(good(format_port_mapping(mapping)))


def load_labels(labels_file):
    with open(labels_file, 'r', encoding='utf-8') as f:
        labels = json.load(f)
    if not isinstance(labels, dict):
        raise MalformedLabelError(f"{labels_file} must hold a JSON object of labels")
    return labels


def cmd_parse(args):
    limit = args.max_auto_range or get_max_auto_port_range()
    mappings = parse_publish_flags(args.publish, max_auto_range=limit)
    print_mappings(mappings, args.output_format)


def cmd_decode(args):
    if args.labels_file:
        labels = load_labels(args.labels_file)
    else:
        labels = {args.label_key: args.value}
    mappings = parse_ports_label(labels, label_key=args.label_key)
    print_mappings(sorted(mappings), args.output_format)


def cmd_format(args):
    limit = args.max_auto_range or get_max_auto_port_range()
    mappings = parse_publish_flags(args.publish, max_auto_range=limit)
    print(format_port_list(mappings))


COMMANDS = {
    'parse': cmd_parse,
    'decode': cmd_decode,
    'format': cmd_format,
}


def main(argv=None):
    """Main entry point for the portpub CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.subcommand:
        print(info(f'Welcome to {bold("portpub")}! Use "portpub -h" for help.'))
        return 0

    try:
        COMMANDS[args.subcommand](args)
    except PortSpecError as e:
        print(bad(str(e)))
        return 1
    except OSError as e:
        print(bad(f'Could not read labels file: {e}'))
        return 1
    except ValueError as e:
        # Bad PORTPUB_MAX_AUTO_PORT_RANGE or a labels file that is not JSON
        print(bad(str(e)))
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
