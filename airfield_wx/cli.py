#!/usr/bin/env python3

import sys
import json
import argparse
import logging
from typing import List, Optional

from airfield_wx import config
from airfield_wx.sources.avwx import AvWxSource
from airfield_wx.weather.parser import decode

logger = logging.getLogger(__name__)


class Command:
    """Command-line interface for decoding and fetching airfield weather."""

    def __init__(self, args, source: Optional[AvWxSource] = None):
        """
        Args:
            args: Parsed command line arguments
            source: Weather source, created on demand when not given
        """
        self.args = args
        self._source = source

    @property
    def source(self) -> AvWxSource:
        if self._source is None:
            self._source = AvWxSource(timeout=self.args.timeout)
        return self._source

    def cmd_decode(self) -> int:
        report = decode(" ".join(self.args.metar))
        if not report.has_data:
            logger.warning("No recognisable METAR groups in input")
        self._print(report.to_dict())
        return 0

    def cmd_fetch(self) -> int:
        station = self.args.station
        logger.info(f"Fetching weather for {station}")
        demo_fallback = False if self.args.no_demo else None
        snapshot = self.source.fetch_snapshot(station, demo_fallback=demo_fallback)
        self._print(snapshot.to_dict())
        if snapshot.metar is None:
            logger.error(f"No METAR available for {station}")
            return 1
        return 0

    def run(self) -> int:
        return getattr(self, f"cmd_{self.args.command}")()

    def _print(self, data: dict):
        json.dump(data, sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Airfield weather kiosk tool')
    parser.add_argument('-v', '--verbose', help='Verbose output', action='store_true')

    subparsers = parser.add_subparsers(dest='command', required=True)

    decode_parser = subparsers.add_parser('decode', help='Decode a raw METAR')
    decode_parser.add_argument('metar', help='Raw METAR text (quoted or as separate groups)', nargs='+')

    fetch_parser = subparsers.add_parser('fetch', help='Fetch and decode current weather')
    fetch_parser.add_argument('-s', '--station', help='ICAO station identifier', default=config.STATION)
    fetch_parser.add_argument('--timeout', help='HTTP timeout in seconds', type=int, default=config.TIMEOUT)
    fetch_parser.add_argument('--no-demo', help='Do not fall back to demo data', action='store_true')

    return parser


def main(argv: Optional[List[str]] = None, source: Optional[AvWxSource] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    return Command(args, source=source).run()


if __name__ == '__main__':
    sys.exit(main())
