"""
===============================================================================
QUATKIT - COMMAND LINE ENTRY POINT
===============================================================================
Small calculator over the quaternion operations.

USAGE:
    quatkit from-euler 0.3 0.2 0.1          # roll, pitch, yaw -> w x y z
    quatkit --degrees euler 0.9 0.1 0.2 0.3 # w x y z -> roll, pitch, yaw
    quatkit rotmat 1 0 0 0                  # 3x3 rotation matrix
    quatkit prod -q 0 1 0 0 -q 0 0 1 0      # Hamilton product, left to right
    quatkit --checked unit 0 0 0 0          # exits 1 instead of printing nan

Single-quaternion commands take four numbers W X Y Z. prod and sum take
any number of operands, each given as "-q W X Y Z" in multiplication order.
===============================================================================
"""

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from quatkit.config import ConfigError, QuatkitConfig, load_config
from quatkit.constants import DEG2RAD, RAD2DEG
from quatkit.quaternion import (
    DegenerateQuaternionError,
    Quaternion,
    conj,
    euler,
    from_euler,
    inv,
    norm,
    prod,
    qsum,
    rot_mat,
    unit,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(config: QuatkitConfig, verbose: bool = False) -> None:
    """Configure the root logger from the config (stderr + optional file)."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, mode='a'))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)


def format_numbers(values: Sequence[float], precision: int) -> str:
    return ' '.join(f"{float(v):.{precision}f}" for v in values)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='quatkit',
        description='Quaternion algebra: products, inverses, Euler angles, rotation matrices',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quatkit from-euler 0.3 0.2 0.1          Quaternion from roll/pitch/yaw
  quatkit --degrees euler 1 0 0 1         Euler angles in degrees
  quatkit prod -q 0 1 0 0 -q 0 0 1 0      i * j = k
        """
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to quatkit YAML config')
    parser.add_argument('--degrees', action='store_true',
                        help='Euler angles in degrees (overrides config)')
    parser.add_argument('--checked', action='store_true',
                        help='Fail on zero-norm quaternions instead of printing nan')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging')

    sub = parser.add_subparsers(dest='command', metavar='COMMAND')
    sub.required = True

    p = sub.add_parser('from-euler', help='Quaternion from roll, pitch, yaw')
    p.add_argument('angles', type=float, nargs=3, metavar=('PHI', 'THETA', 'PSI'))

    for name, help_text in (
        ('euler', 'Roll, pitch, yaw of a quaternion'),
        ('rotmat', '3x3 rotation matrix of a quaternion'),
        ('unit', 'Quaternion rescaled to unit norm'),
        ('inv', 'Multiplicative inverse'),
        ('conj', 'Conjugate'),
        ('norm', 'Euclidean norm'),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('components', type=float, nargs=4, metavar=('W', 'X', 'Y', 'Z'))

    for name, help_text in (
        ('prod', 'Hamilton product, left to right'),
        ('sum', 'Component-wise sum'),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('-q', '--quaternion', dest='quaternions', action='append',
                       type=float, nargs=4, metavar=('W', 'X', 'Y', 'Z'),
                       required=True, help='operand, repeat for each quaternion')

    return parser


def run_command(args: argparse.Namespace, config: QuatkitConfig) -> List[str]:
    """
    Execute the parsed command and return the output lines.

    Raises
    ------
    DegenerateQuaternionError
        In checked mode, for a zero-norm or non-finite quaternion.
    """
    precision = config.precision
    checked = args.checked or config.checked
    degrees = args.degrees or config.degrees
    command = args.command

    if command == 'from-euler':
        angles = np.asarray(args.angles, dtype=np.float64)
        if degrees:
            angles = angles * DEG2RAD
        q = from_euler(*angles)
        return [format_numbers(q, precision)]

    if command in ('prod', 'sum'):
        op = prod if command == 'prod' else qsum
        operands = [Quaternion(*components) for components in args.quaternions]
        return [format_numbers(op(*operands), precision)]

    q = Quaternion(*args.components)
    logger.debug("%s of %r (checked=%s)", command, q, checked)

    if command == 'euler':
        angles = np.asarray(euler(q, checked=checked))
        if degrees:
            angles = angles * RAD2DEG
        return [format_numbers(angles, precision)]
    if command == 'rotmat':
        return [format_numbers(row, precision) for row in rot_mat(q, checked=checked)]

    single: Dict[str, Callable[[Quaternion], Quaternion]] = {
        'unit': lambda v: unit(v, checked=checked),
        'inv': lambda v: inv(v, checked=checked),
        'conj': conj,
    }
    if command == 'norm':
        return [format_numbers([norm(q)], precision)]
    return [format_numbers(single[command](q), precision)]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point. Returns the process exit status: 0 on success, 1 when
    the configuration is invalid or a checked operation rejects its input.
    argparse exits with 2 on malformed arguments.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error("Configuration error: %s", e)
        return 1

    try:
        setup_logging(config, verbose=args.verbose)
    except OSError as e:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error("Cannot open log file: %s", e)
        return 1

    try:
        lines = run_command(args, config)
    except DegenerateQuaternionError as e:
        logger.error("%s", e)
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
