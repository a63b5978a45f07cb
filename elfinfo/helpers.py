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

import os
import logging
from pathlib import Path

from rich.console import Console

logger = logging.getLogger("elfinfo")

ELF_MAGIC = b"\x7fELF"

# shared console used to redirect logging to stderr
log_console: Console = Console(stderr=True)


def get_file_taste(sample_path: Path) -> bytes:
    if not sample_path.exists():
        raise IOError(f"{sample_path}: no such file or directory")
    with sample_path.open("rb") as f:
        return f.read(8)


def is_elf(taste: bytes) -> bool:
    return taste.startswith(ELF_MAGIC)


def which(filename: str) -> Path:
    """
    resolve the given filename like a shell would resolve a command name:
    use it as-is when it exists, otherwise look for it in each directory of $PATH.

    raises:
      IOError: if the file can't be found anywhere.
    """
    path = Path(filename)
    if path.exists():
        return path

    for directory in os.environ.get("PATH", "").split(os.pathsep):
        if not directory:
            continue

        candidate = Path(directory) / filename
        if candidate.exists():
            logger.debug("found %s in $PATH: %s", filename, candidate)
            return candidate

    raise IOError(f"{filename}: no such file or directory")
