import argparse
import logging
import os
from typing import Optional

from PIL import Image

from ora_tools import OpenRasterImage
from ora_tools.errors import OpenRasterError
from ora_tools.ora.archive import ArchiveReader
from ora_tools.version import __version__

try:
    from IPython.lib.pretty import pprint
except ImportError:
    from pprint import pprint

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="ora-tools command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export ORA or layer as PNG")
    export_parser.add_argument(
        "input_file",
        help="Input ORA file (optionally with layer index, e.g. file.ora[0])",
    )
    export_parser.add_argument("output_file", help="Output image file")

    show_parser = subparsers.add_parser("show", help="Show the file content")
    show_parser.add_argument("input_file", help="Input ORA file")

    debug_parser = subparsers.add_parser("debug", help="Show the stack.xml manifest")
    debug_parser.add_argument("input_file", help="Input ORA file")

    create_parser = subparsers.add_parser(
        "create", help="Create an ORA file from images, bottom to top"
    )
    create_parser.add_argument("output_file", help="Output ORA file")
    create_parser.add_argument("images", nargs="+", help="Input image files")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    if args.verbose:
        logging.getLogger("ora_tools").setLevel(logging.DEBUG)
    else:
        logging.getLogger("ora_tools").setLevel(logging.INFO)

    try:
        if args.command == "export":
            return export(args.input_file, args.output_file)

        elif args.command == "show":
            pprint(OpenRasterImage.open(args.input_file))

        elif args.command == "debug":
            with ArchiveReader(args.input_file) as archive:
                pprint(archive.read_manifest())

        elif args.command == "create":
            create(args.output_file, args.images)

    except (OpenRasterError, OSError, ValueError) as e:
        logger.error(str(e))
        return 1

    return None


def export(input_file: str, output_file: str) -> Optional[int]:
    input_parts = input_file.split("[")
    index = None
    if len(input_parts) > 1:
        try:
            index = int(input_parts[1].rstrip("]"))
        except ValueError:
            logger.error("Invalid layer index in %s", input_file)
            return 1
    document = OpenRasterImage.open(input_parts[0])
    for error in document.errors:
        logger.warning(str(error))

    if index is None:
        image = document.composite()
    else:
        try:
            image = document[index].topil()
        except IndexError:
            logger.error("No layer at index %d in %s", index, input_parts[0])
            return 1
    image.save(output_file)
    return None


def create(output_file: str, images: list[str]) -> None:
    sources = []
    try:
        for filename in images:
            sources.append(Image.open(filename))
        width = max(image.width for image in sources)
        height = max(image.height for image in sources)
        document = OpenRasterImage.new((width, height))
        for filename, image in zip(images, sources):
            name = os.path.splitext(os.path.basename(filename))[0]
            document.create_pixel_layer(image, name=name)
        document.save(output_file)
    finally:
        for image in sources:
            image.close()
