#!/usr/bin/env python3
"""
bulk-process

Examine all ELF files in the given directory tree in parallel,
and emit a JSON document keyed by file path.

Files that aren't ELF files are skipped.

By default, this will use subprocesses for parallelism.
Use `-n/--parallelism` to change the subprocess count from
 the default of current CPU count.
Use `--no-mp` to use threads instead of processes,
 which is probably not useful unless you set `--parallelism=1`.

example:

    $ python scripts/bulk-process.py /usr/bin
    {
      "/usr/bin/ls": {
        "path": "/usr/bin/ls",
        "stripped": true,
        "compiler": "GCC 12.2.0",
        "static": false,
        "byteorder": "LE",
        "machine": "Advanced Micro Devices X86-64"
      },
      "/usr/bin/docker": { ... }
    }


usage:

    usage: bulk-process.py [-h] [--version] [-d] [-q] [--color {auto,always,never}]
                           [-n PARALLELISM] [--no-mp]
                           input_directory

    examine ELF files in bulk.

    positional arguments:
      input_directory       Path to directory of files to recursively examine

    optional arguments:
      -h, --help            show this help message and exit
      -d, --debug           Enable debugging output on STDERR
      -q, --quiet           Disable all output but errors
      -n PARALLELISM, --parallelism PARALLELISM
                            parallelism factor
      --no-mp               disable subprocesses

Copyright 2021 Google LLC

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""
import sys
import json
import logging
import argparse
import multiprocessing
import multiprocessing.pool
from pathlib import Path

import elfinfo.main
import elfinfo.helpers
import elfinfo.loader

logger = logging.getLogger("elfinfo")


def get_elfinfo_results(input_file: str) -> dict:
    """
    examine the ELF file at the given path.

    returns an dict with two required keys:
      path (str): the file system path of the sample to process
      status (str): either "error", "skipped" or "ok"

    when status == "error", then a human readable message is found in property "error".
    when status == "ok", then the results are found in the property "ok".
    """
    path = Path(input_file)
    try:
        if not elfinfo.helpers.is_elf(elfinfo.helpers.get_file_taste(path)):
            return {"path": input_file, "status": "skipped"}

        info = elfinfo.loader.examine(path)
    except elfinfo.loader.CorruptElfFile as e:
        # i'm not 100% sure if multiprocessing will reliably raise exceptions across process boundaries.
        # so instead, return an object with explicit success/failure status.
        return {
            "path": input_file,
            "status": "error",
            "error": f"not a valid ELF file: {e}",
            "status_code": elfinfo.main.E_CORRUPT_FILE,
        }
    except OSError as e:
        return {
            "path": input_file,
            "status": "error",
            "error": f"cannot be read: {e}",
            "status_code": elfinfo.main.E_MISSING_FILE,
        }
    except Exception as e:
        return {
            "path": input_file,
            "status": "error",
            "error": f"unexpected error: {e}",
        }

    return {"path": input_file, "status": "ok", "ok": info.model_dump()}


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="examine ELF files in bulk.")
    elfinfo.main.install_common_args(parser)
    parser.add_argument("input_directory", type=str, help="Path to directory of files to recursively examine")
    parser.add_argument(
        "-n", "--parallelism", type=int, default=multiprocessing.cpu_count(), help="parallelism factor"
    )
    parser.add_argument("--no-mp", action="store_true", help="disable subprocesses")
    args = parser.parse_args(args=argv)

    elfinfo.main.handle_common_args(args)

    samples = []
    for file in Path(args.input_directory).rglob("*"):
        if file.is_file():
            samples.append(str(file))

    cpu_count = multiprocessing.cpu_count()

    def pmap(f, args, parallelism=cpu_count):
        """apply the given function f to the given args using subprocesses"""
        with multiprocessing.Pool(parallelism) as pool:
            yield from pool.imap(f, args)

    def tmap(f, args, parallelism=cpu_count):
        """apply the given function f to the given args using threads"""
        with multiprocessing.pool.ThreadPool(parallelism) as pool:
            yield from pool.imap(f, args)

    def map(f, args, parallelism=None):
        """apply the given function f to the given args in the current thread"""
        for arg in args:
            yield f(arg)

    if args.no_mp:
        if args.parallelism == 1:
            logger.debug("using current thread mapper")
            mapper = map
        else:
            logger.debug("using threading mapper")
            mapper = tmap
    else:
        logger.debug("using process mapper")
        mapper = pmap

    results = {}
    for result in mapper(get_elfinfo_results, samples, parallelism=args.parallelism):
        if result["status"] == "error":
            logger.warning("%s: %s", result["path"], result["error"])
        elif result["status"] == "skipped":
            logger.debug("%s: not an ELF file", result["path"])
        elif result["status"] == "ok":
            results[result["path"]] = result["ok"]
        else:
            raise ValueError(f"unexpected status: {result['status']}")

    print(json.dumps(results, indent=2))

    logger.info("done.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
