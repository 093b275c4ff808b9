"""Headless compositor - CLI entry point.

Loads a pixel grid project file, flattens its layer tree and writes the
composite buffer as JSON (a list of size*size color tokens), or a text
preview of it.

Usage:
    python -m pixelgrid.headless <project_file> [-o OUTPUT] [--ascii] [-v]

Examples:
    python -m pixelgrid.headless sprite.json
    python -m pixelgrid.headless sprite.json -o flat.json
    python -m pixelgrid.headless sprite.json --ascii
"""

import sys
import os
import json
import argparse
import logging

from pixelgrid.models.color import ColorBlend
from pixelgrid.services.file_operations import load_project, ProjectFileError


def render_ascii(composite, size):
    """Text preview: '.' transparent, '+' translucent, '#' opaque"""
    rows = []
    for y in range(size):
        row = []
        for token in composite[y * size:(y + 1) * size]:
            alpha = ColorBlend.parse(token).a
            if alpha <= 0:
                row.append('.')
            elif alpha < 1:
                row.append('+')
            else:
                row.append('#')
        rows.append(''.join(row))
    return '\n'.join(rows)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Flatten a pixel grid project to its composite image (headless).',
    )
    parser.add_argument(
        'project_file',
        help='Path to a project file (JSON with gridSize and layerManagerSnapshot).',
    )
    parser.add_argument(
        '-o', '--output',
        default=None,
        help='Write the result to this file instead of stdout.',
    )
    parser.add_argument(
        '-a', '--ascii',
        action='store_true',
        help='Print a text preview instead of the JSON token list.',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging.',
    )
    args = parser.parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    input_path = os.path.abspath(args.project_file)
    if not os.path.isfile(input_path):
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        tree = load_project(input_path)
    except ProjectFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    composite = tree.get_composite()
    if args.ascii:
        text = render_ascii(composite, tree.size)
    else:
        text = json.dumps(composite)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text + '\n')
        logging.getLogger('Headless').info(f"Wrote {args.output}")
    else:
        print(text)


if __name__ == '__main__':
    main()
