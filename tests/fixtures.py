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

import struct
from typing import Optional
from pathlib import Path

import pytest

from elfinfo.sections import SectionProvider

EM_386 = 3
EM_PPC64 = 21
EM_X86_64 = 62

SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_DYNAMIC = 6

PT_DYNAMIC = 2
PT_INTERP = 3

DT_NULL = 0
DT_NEEDED = 1

ELF64_EHDR_SIZE = 0x40
ELF64_PHDR_SIZE = 0x38
ELF64_SHDR_SIZE = 0x40
ELF64_SYM_SIZE = 0x18
ELF64_DYN_SIZE = 0x10


class DictSectionProvider(SectionProvider):
    """
    serve section contents from a dict of name to bytes.
    a value of None means the section exists, but its contents can't be read.
    """

    def __init__(self, sections: dict[str, Optional[bytes]]):
        super().__init__()
        self.sections = sections
        self.requested: list[str] = []

    def get_section_data(self, name: str) -> Optional[bytes]:
        self.requested.append(name)
        return self.sections.get(name)

    def has_section(self, name: str) -> bool:
        return name in self.sections


def build_elf(
    sections: Optional[dict[str, bytes]] = None,
    symbols: Optional[list[str]] = None,
    interp: Optional[str] = None,
    needed: Optional[list[str]] = None,
    machine: int = EM_X86_64,
    big_endian: bool = False,
    symtab_entsize: int = ELF64_SYM_SIZE,
    symtab_data: Optional[bytes] = None,
) -> bytes:
    """
    assemble a minimal 64-bit ELF executable with the given contents.

    args:
      sections: names and contents of PROGBITS sections to include.
      symbols: when provided, add a .symtab/.strtab pair with these symbol names.
      symtab_entsize: the sh_entsize recorded for .symtab.
      symtab_data: raw contents for .symtab, replacing the entries generated from `symbols`.
      interp: when provided, add a PT_INTERP program header for this dynamic linker.
      needed: when provided, add a PT_DYNAMIC program header with a DT_NEEDED entry for each library.
    """
    e = ">" if big_endian else "<"

    # (name, type, link, entsize, data)
    shdrs: list[tuple[str, int, int, int, bytes]] = []
    for name, data in (sections or {}).items():
        shdrs.append((name, SHT_PROGBITS, 0, 0, data))

    if interp is not None:
        shdrs.append((".interp", SHT_PROGBITS, 0, 0, interp.encode("ascii") + b"\x00"))

    if symbols is not None:
        strtab = b"\x00"
        symtab = b"\x00" * ELF64_SYM_SIZE
        for symbol in symbols:
            # STB_GLOBAL | STT_FUNC, in section 1
            symtab += struct.pack(e + "IBBHQQ", len(strtab), 0x12, 0, 1, 0x401000, 0x10)
            strtab += symbol.encode("ascii") + b"\x00"
        # section indexes start at 1, after the null section
        strtab_index = len(shdrs) + 2
        if symtab_data is not None:
            symtab = symtab_data
        shdrs.append((".symtab", SHT_SYMTAB, strtab_index, symtab_entsize, symtab))
        shdrs.append((".strtab", SHT_STRTAB, 0, 0, strtab))

    if needed is not None:
        dynstr = b"\x00"
        dynamic = b""
        for library in needed:
            dynamic += struct.pack(e + "qQ", DT_NEEDED, len(dynstr))
            dynstr += library.encode("ascii") + b"\x00"
        dynamic += struct.pack(e + "qQ", DT_NULL, 0)
        dynstr_index = len(shdrs) + 1
        shdrs.append((".dynstr", SHT_STRTAB, 0, 0, dynstr))
        shdrs.append((".dynamic", SHT_DYNAMIC, dynstr_index, ELF64_DYN_SIZE, dynamic))

    shstrtab = b"\x00"
    name_offsets = []
    for name, *_ in shdrs:
        name_offsets.append(len(shstrtab))
        shstrtab += name.encode("ascii") + b"\x00"
    name_offsets.append(len(shstrtab))
    shstrtab += b".shstrtab\x00"
    shdrs.append((".shstrtab", SHT_STRTAB, 0, 0, shstrtab))

    phnum = (1 if interp is not None else 0) + (1 if needed is not None else 0)
    phoff = ELF64_EHDR_SIZE if phnum else 0

    # lay out the section contents after the headers
    offset = ELF64_EHDR_SIZE + phnum * ELF64_PHDR_SIZE
    body = b""
    offsets = []
    for _, _, _, _, data in shdrs:
        offsets.append(offset + len(body))
        body += data
    shoff = offset + len(body)

    phdrs = b""
    for (name, _, _, _, data), data_offset in zip(shdrs, offsets):
        if name == ".interp":
            phdrs += struct.pack(e + "IIQQQQQQ", PT_INTERP, 4, data_offset, 0, 0, len(data), len(data), 1)
        elif name == ".dynamic":
            phdrs += struct.pack(e + "IIQQQQQQ", PT_DYNAMIC, 6, data_offset, 0, 0, len(data), len(data), 8)

    section_headers = b"\x00" * ELF64_SHDR_SIZE
    for (_, sh_type, link, entsize, data), name_offset, data_offset in zip(shdrs, name_offsets, offsets):
        section_headers += struct.pack(
            e + "IIQQQQIIQQ", name_offset, sh_type, 0, 0, data_offset, len(data), link, 0, 1, entsize
        )

    ident = b"\x7fELF" + bytes([2, 2 if big_endian else 1, 1, 0]) + b"\x00" * 8
    header = ident + struct.pack(
        e + "HHIQQQIHHHHHH",
        2,  # ET_EXEC
        machine,
        1,  # EV_CURRENT
        0x401000,
        phoff,
        shoff,
        0,
        ELF64_EHDR_SIZE,
        ELF64_PHDR_SIZE,
        phnum,
        ELF64_SHDR_SIZE,
        len(shdrs) + 1,
        len(shdrs),
    )

    return header + phdrs + body + section_headers


@pytest.fixture
def write_elf(tmp_path):
    """write an ELF file built by `build_elf` to a temporary path, returning the path"""

    def write(name="sample.elf_", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_elf(**kwargs))
        return path

    return write


GCC_COMMENT = b"GCC: (Debian 6.3.0-18+deb9u1) 6.3.0 20170516\x00"
CLANG_COMMENT = b"GCC: (GNU) 6.3.0\x00clang version 9.0.0 (tags/RELEASE_900/final)\x00"
RUST_DEBUG_STR = b"\x00src/main.rs\x00clang LLVM (rustc version 1.27.0 (3eda71b00 2018-06-19))\x00"
