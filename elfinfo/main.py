#!/usr/bin/env python3
# Copyright 2021 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import io
import sys
import logging
import argparse
import textwrap
from types import TracebackType
from typing import Optional
from pathlib import Path

import colorama
from rich.console import Console
from rich.logging import RichHandler

import elfinfo.helpers
import elfinfo.loader
import elfinfo.render
import elfinfo.version
from elfinfo.loader import ElfInfo, CorruptElfFile

E_MISSING_FILE = 11
E_CORRUPT_FILE = 13

logger = logging.getLogger("elfinfo")


def simple_message_exception_handler(
    exctype: type[BaseException], value: BaseException, traceback: TracebackType | None
):
    """
    prints friendly message on unexpected exceptions to regular users (debug mode shows regular stack trace)
    """

    if exctype is KeyboardInterrupt:
        print("KeyboardInterrupt detected, program terminated", file=sys.stderr)
    else:
        print(
            f"Unexpected exception raised: {exctype}. Please run elfinfo in debug mode (-d/--debug) "
            + "to see the stack trace.",
            file=sys.stderr,
        )


def install_common_args(parser, wanted=None):
    """
    register a common set of command line arguments for re-use by main & scripts.
    these are things like logging/coloring/etc.
    also enable callers to opt-in to common arguments, like specifying the input files.

    see `handle_common_args` to do common configuration.

    args:
      parser (argparse.ArgumentParser): a parser to update in place, adding common arguments.
      wanted (set[str]): collection of arguments to opt-into, including:
        - "input_file": required positional argument to a single input file.
        - "input_files": required positional argument to one or more input files.
        - "compiler": flag to only report the compiler.
        - "json": flag to emit JSON.
    """
    if wanted is None:
        wanted = set()

    #
    # common arguments that all scripts will have
    #

    parser.add_argument(
        "--version", action="version", version="%(prog)s {:s}".format(elfinfo.version.__version__)
    )
    parser.add_argument("-d", "--debug", action="store_true", help="enable debugging output on STDERR")
    parser.add_argument("-q", "--quiet", action="store_true", help="disable all output but errors")
    parser.add_argument(
        "--color",
        type=str,
        choices=("auto", "always", "never"),
        default="auto",
        help="enable ANSI color codes in results, default: only during interactive session",
    )

    if "input_file" in wanted:
        parser.add_argument(
            "input_file",
            type=str,
            help="path to file to examine, or the name of a file in $PATH",
        )

    if "input_files" in wanted:
        parser.add_argument(
            "input_files",
            type=str,
            nargs="+",
            help="paths to files to examine, or the names of files in $PATH",
        )

    output = parser.add_mutually_exclusive_group()
    if "compiler" in wanted:
        output.add_argument(
            "-c", "--compiler", action="store_true", help="only detect compiler name and version"
        )

    if "json" in wanted:
        output.add_argument("-j", "--json", action="store_true", help="emit JSON instead of text")


###############################################################################
#
# "main routines"
#
# These routines rely upon the given CLI arguments and write to output streams.
# They may raise `ShouldExitError` to indicate the program should exit;
# programs should handle it and pass the status code to `sys.exit()`.
# Library code should *not* call these functions.
#


class ShouldExitError(Exception):
    """raised when a main-related routine indicates the program should exit."""

    def __init__(self, status_code: int):
        self.status_code = status_code


def handle_common_args(args):
    """
    handle the global config specified by `install_common_args`,
    such as configuring logging/coloring/etc.

    args:
      args: The parsed command line arguments from `install_common_args`.
    """
    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)
    elif args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.INFO)

    # use [/] after the logger name to reset any styling,
    # and prevent the color from carrying over to the message
    logformat = "[dim]%(name)s[/]: %(message)s"

    # set markup=True to allow the use of Rich's markup syntax in log messages
    rich_handler = RichHandler(markup=True, show_time=False, show_path=True, console=elfinfo.helpers.log_console)
    rich_handler.setFormatter(logging.Formatter(logformat))

    # use RichHandler for root logger
    logging.getLogger().addHandler(rich_handler)

    if isinstance(sys.stdout, io.TextIOWrapper) or hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")
    colorama.just_fix_windows_console()

    if args.color == "always":
        colorama.init(strip=False)
    elif args.color == "auto":
        # colorama will detect:
        #  - when on Windows console, and fixup coloring, and
        #  - when not an interactive session, and disable coloring
        colorama.init()
    elif args.color == "never":
        colorama.init(strip=True)
    else:
        raise RuntimeError("unexpected --color value: " + args.color)

    if not args.debug:
        sys.excepthook = simple_message_exception_handler


def get_output_console(args) -> Console:
    """the console that results are written to, honoring `--color`."""
    if args.color == "always":
        return Console(highlight=False, soft_wrap=True, force_terminal=True)
    elif args.color == "never":
        return Console(highlight=False, soft_wrap=True, color_system=None)
    else:
        return Console(highlight=False, soft_wrap=True)


def get_input_path(filename: str) -> Path:
    """
    raises:
      ShouldExitError: if the file doesn't exist, here or in $PATH.
    """
    try:
        return elfinfo.helpers.which(filename)
    except IOError as e:
        logger.error("%s", e.args[0])
        raise ShouldExitError(E_MISSING_FILE) from e


def get_input_filenames_from_cli(args) -> list[str]:
    if hasattr(args, "input_files"):
        return args.input_files
    else:
        return [args.input_file]


def examine_from_cli(path: Path) -> ElfInfo:
    """
    raises:
      ShouldExitError: if the file can't be read or isn't a valid ELF file.
    """
    try:
        return elfinfo.loader.examine(path)
    except CorruptElfFile as e:
        logger.error("Input file '%s' is not a valid ELF file: %s", path, str(e))
        raise ShouldExitError(E_CORRUPT_FILE) from e
    except OSError as e:
        logger.error("Input file '%s' cannot be read: %s", path, str(e))
        raise ShouldExitError(E_MISSING_FILE) from e


def detect_compiler_from_cli(path: Path) -> str:
    """
    raises:
      ShouldExitError: if the file can't be read or isn't a valid ELF file.
    """
    try:
        return elfinfo.loader.detect_compiler_from_path(path)
    except CorruptElfFile as e:
        logger.error("Input file '%s' is not a valid ELF file: %s", path, str(e))
        raise ShouldExitError(E_CORRUPT_FILE) from e
    except OSError as e:
        logger.error("Input file '%s' cannot be read: %s", path, str(e))
        raise ShouldExitError(E_MISSING_FILE) from e


def main(argv: Optional[list[str]] = None):
    if argv is None:
        argv = sys.argv[1:]

    desc = "Detect which compiler produced an ELF file, along with other basic properties."
    epilog = textwrap.dedent(
        """
        When a file isn't found at the given path, each directory in $PATH is searched for it.

        examples:
          summarize an executable
            elfinfo /bin/ls

          only report the compiler, like "GCC 6.3.1" or "Go 1.15.6"
            elfinfo -c ls

          summarize many files as JSON
            elfinfo -j /usr/bin/*
        """
    )

    parser = argparse.ArgumentParser(
        description=desc, epilog=epilog, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    install_common_args(parser, {"input_files", "compiler", "json"})
    args = parser.parse_args(args=argv)

    handle_common_args(args)
    try:
        console = get_output_console(args)

        # a missing or broken file doesn't prevent examining the remaining ones,
        # but the first failure determines the exit status.
        status_code = 0
        infos: list[ElfInfo] = []
        for filename in get_input_filenames_from_cli(args):
            try:
                path = get_input_path(filename)
                if args.compiler:
                    console.print(elfinfo.render.render_compiler(detect_compiler_from_cli(path)))
                elif args.json:
                    infos.append(examine_from_cli(path))
                else:
                    console.print(elfinfo.render.render_default(examine_from_cli(path)))
            except ShouldExitError as e:
                status_code = status_code or e.status_code

        if args.json:
            print(elfinfo.render.render_json(infos))
    finally:
        colorama.deinit()

    logger.debug("done.")

    return status_code


if __name__ == "__main__":
    sys.exit(main())
