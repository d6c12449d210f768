#!/usr/bin/env python3
#
# PROJECT: recursive-mirrors
# MODULE: client_demo.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

import curses
import argparse
import logging
import sys
import os

# Ensure local package is importable
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from recursive_mirrors.demo import main


def parse_args(argv=None):
    """CLI argument parser for the interactive mirror viewer."""
    epilog = """\
examples:
  %(prog)s                                  Built-in mirror room
  %(prog)s room.json                        Load a JSON scene description
  %(prog)s --depth 3 --resolution 128       Shallow recursion, small mirror textures
  %(prog)s --variant chain                  Fixed-chain mirrors (no visibility test)
  %(prog)s --log-file mirrors.log --log-level DEBUG   Trace the traversal

keys:
  arrows orbit, +/- zoom, [ ] fov, < > recursion depth, m cycle view,
  v show frustums, l toggle visibility listing, c culling, b braille, q quit
"""
    parser = argparse.ArgumentParser(
        description="Recursive mirror renderer",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("scene", nargs='?', help="Path to a JSON scene description")
    parser.add_argument("--depth", type=int, default=10,
                        help="Maximum mirror recursion depth (default: 10)")
    parser.add_argument("--resolution", type=int, default=512,
                        help="Mirror render target resolution (default: 512)")
    parser.add_argument("--variant", choices=("flexible", "chain"), default="flexible",
                        help="Mirror manager variant (default: flexible)")
    parser.add_argument("--no-color", action="store_true",
                        help="Disable color output")
    parser.add_argument("--ascii", action="store_true",
                        help="Use ASCII characters instead of Braille")
    parser.add_argument("--no-cull", action="store_true",
                        help="Disable backface culling")
    parser.add_argument("--log-file", default=None,
                        help="Write logs to this file (the terminal belongs to curses)")
    parser.add_argument("--log-level", default="WARNING",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
                        help="Log level (default: WARNING)")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    if args.log_file:
        logging.basicConfig(filename=args.log_file, level=getattr(logging, args.log_level),
                            format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        curses.wrapper(lambda s: main(s, args))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
