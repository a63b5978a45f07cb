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

import logging
import contextlib
from typing import Iterator
from pathlib import Path

from pydantic import BaseModel, ConfigDict
from elftools.elf.elffile import ELFFile
from elftools.common.exceptions import ELFError

import elfinfo.binary
import elfinfo.compilers

logger = logging.getLogger(__name__)


class CorruptElfFile(ValueError):
    pass


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ElfInfo(FrozenModel):
    path: str
    stripped: bool
    compiler: str
    static: bool
    byteorder: str
    machine: str


@contextlib.contextmanager
def open_elf(path: Path) -> Iterator[ELFFile]:
    """
    open the ELF file at the given path.
    the underlying file is closed when the context exits, however it exits.

    raises:
      OSError: if the file can't be opened or read.
      CorruptElfFile: if the file isn't an ELF file, or its headers can't be parsed.
    """
    with path.open("rb") as f:
        try:
            elf = ELFFile(f)
        except (ELFError, OverflowError) as e:
            raise CorruptElfFile(str(e)) from e

        yield elf


def examine_elf(path: Path, elf: ELFFile) -> ElfInfo:
    return ElfInfo(
        path=str(path),
        stripped=elfinfo.binary.is_stripped(elf),
        compiler=elfinfo.compilers.detect_elf_compiler(elf),
        static=elfinfo.binary.is_static(elf),
        byteorder=elfinfo.binary.get_byteorder(elf),
        machine=elfinfo.binary.get_machine(elf),
    )


def examine(path: Path) -> ElfInfo:
    logger.debug("examining: %s", path)
    with open_elf(path) as elf:
        return examine_elf(path, elf)


def detect_compiler_from_path(path: Path) -> str:
    with open_elf(path) as elf:
        return elfinfo.compilers.detect_elf_compiler(elf)
