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

"""
identify the compiler toolchain that produced an ELF file.

each `detect_*` function below is a probe: it takes a SectionProvider,
looks for the fingerprints one toolchain leaves in a specific section,
and returns a label like "GCC 6.3.1" or None when there's no evidence.
`detect_compiler` runs the probes in the order given by `PROBES`
and returns the first label it gets.
"""

import re
import logging
from typing import Callable, Optional

from elftools.elf.elffile import ELFFile

from elfinfo.versions import first_is_greater
from elfinfo.sections import SectionProvider, ElfSectionProvider

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
UNKNOWN_VERSION = "(unknown version)"

GCC_MARKER = b"GCC: ("
GNU_ENDING = b"GNU) "
CLANG_MARKER = b"clang version"
RUST_MARKER = b"rustc version"
RUST_SYMBOL = b"__rust_"
OCAML_MARKER = b"[ocaml]"

# like: 6.3.0, 4.05.0, 1.*
VERSION = re.compile(rb"(\d+\.)(\d+\.)?(\*|\d+)")
# same as above, but must be followed by a space, like: "6.3.0 20170516"
VERSION_SPACE = re.compile(rb"(\d+\.)(\d+\.)?(\*|\d+) ")
# like: go1.15.6
GO_VERSION = re.compile(rb"go(\d+\.)(\d+\.)?(\*|\d+)")
# like: FPC 3.0.2
FPC_VERSION = re.compile(rb"FPC (\d+\.)?(\d+\.)?(\*|\d+)")

Probe = Callable[[SectionProvider], Optional[str]]


def decode(buf: bytes) -> str:
    return buf.decode("utf-8", errors="replace")


def find_version(buf: bytes, pattern: re.Pattern = VERSION) -> Optional[str]:
    """find the first version-looking string in the given bytes, with surrounding whitespace removed"""
    m = pattern.search(buf)
    if not m:
        return None

    version = m.group(0).strip()
    if not version:
        return None

    return decode(version)


def detect_go(sections: SectionProvider) -> Optional[str]:
    """
    example: "Go 1.8.3"

    the Go runtime embeds its version, like `go1.8.3`, in the read-only data.
    newer toolchains also write it into the build info blob.
    stripped Go binaries without a version string still carry Go-specific sections.
    """
    for name in (".rodata", ".go.buildinfo"):
        buf = sections.get_section_data(name)
        if buf is None:
            continue

        m = GO_VERSION.search(buf)
        if m:
            # strip the leading "go"
            return "Go " + decode(m.group(0)[2:])

    for name in (".gosymtab", ".go.buildinfo", ".note.go.buildid"):
        if sections.has_section(name):
            logger.debug("go: found section %s but no version", name)
            return f"Go {UNKNOWN_VERSION}"

    return None


def detect_ocaml(sections: SectionProvider) -> Optional[str]:
    """
    example: "OCaml 4.05.0"
    """
    buf = sections.get_section_data(".rodata")
    if buf is None:
        return None

    if OCAML_MARKER not in buf:
        # probably not OCaml
        return None

    version = find_version(buf)
    if version is None:
        return f"OCaml {UNKNOWN_VERSION}"

    return "OCaml " + version


def detect_rust_unstripped(sections: SectionProvider) -> Optional[str]:
    """
    example: "Rust 1.27.0"

    debug info produced by rustc names the compiler, like:

        clang LLVM (rustc version 1.27.0 (3eda71b00 2018-06-19))
    """
    buf = sections.get_section_data(".debug_str")
    if buf is None:
        return None

    start = buf.find(RUST_MARKER)
    if start == -1:
        return None

    # skip the marker and the single separator that follows it
    start += len(RUST_MARKER) + 1
    end = buf.find(b"(", start)
    if end == -1:
        return None

    return "Rust " + decode(buf[start:end].strip())


def detect_rust_stripped(sections: SectionProvider) -> Optional[str]:
    """
    example: "Rust (GCC 8.1.0)"

    a stripped Rust executable doesn't contain the compiler version,
    but the names of the Rust allocator shims survive as NUL-terminated strings in the read-only data.
    only accept the first `__rust_` when it starts a string (follows a NUL),
    so that it isn't just a substring of some unrelated text.
    """
    buf = sections.get_section_data(".rodata")
    if buf is None:
        return None

    index = buf.find(RUST_SYMBOL)
    if index <= 0 or buf[index - 1] != 0:
        return None

    # Rust may use GCC for linking
    linker = detect_gcc(sections)
    if linker:
        return f"Rust ({linker})"

    return "Rust"


def select_gcc_stamp(buf: bytes) -> bytes:
    """
    when objects built by different GCC versions are linked together,
    the .comment section contains one stamp per version, like:

        GCC: (GNU) 6.3.0GCC: (GNU) 7.2.0

    pick the remainder of the stamp with the greater version.
    only the first two stamps are compared; any further stamps stay attached to the second one.
    """
    _, a, b = buf.split(GCC_MARKER, 2)

    if a.startswith(GNU_ENDING):
        a = a[len(GNU_ENDING) :]
    if b.startswith(GNU_ENDING):
        b = b[len(GNU_ENDING) :]

    logger.debug("gcc: comparing stamps %r and %r", a, b)
    if first_is_greater(decode(a), decode(b)):
        return a
    else:
        return b


def detect_gcc(sections: SectionProvider) -> Optional[str]:
    """
    example: "GCC 6.3.1" or "Clang 9.0.0"

    GCC (and clang, which mimics it) records an .ident directive in the .comment section, like:

        GCC: (Debian 6.3.0-18) 6.3.0 20170516

    when there's no GCC stamp, some other toolchain may still have left its name here,
    so the section text is returned as-is.
    """
    buf = sections.get_section_data(".comment")
    if buf is None:
        return None

    if GCC_MARKER not in buf:
        return decode(buf) or None

    if CLANG_MARKER in buf:
        version = find_version(buf, VERSION_SPACE)
        if version is None:
            return f"Clang {UNKNOWN_VERSION}"
        return "Clang " + version

    if buf.count(GCC_MARKER) > 1:
        buf = select_gcc_stamp(buf)

    version = find_version(buf, VERSION_SPACE) or find_version(buf, VERSION)
    if version is None:
        return f"GCC {UNKNOWN_VERSION}"

    return "GCC " + version


def detect_fpc(sections: SectionProvider) -> Optional[str]:
    """
    example: "FPC 3.0.2"
    """
    buf = sections.get_section_data(".data")
    if buf is None:
        return None

    m = FPC_VERSION.search(buf)
    if not m:
        return None

    return decode(m.group(0))


def detect_tcc(sections: SectionProvider) -> Optional[str]:
    """
    TCC doesn't embed a version number, but its section layout is recognizable:
    it doesn't emit .note.ABI-tag, and it does emit .rodata.cst4.
    """
    if sections.has_section(".note.ABI-tag"):
        return None

    if not sections.has_section(".rodata.cst4"):
        return None

    return "TCC"


# the order matters: the rarer, more specific fingerprints go first,
# because the .comment section checked by `detect_gcc` is also found in binaries
# that were only linked by GCC.
PROBES: tuple[Probe, ...] = (
    detect_go,
    detect_ocaml,
    detect_rust_unstripped,
    detect_rust_stripped,
    detect_gcc,
    detect_fpc,
    detect_tcc,
)


def detect_compiler(sections: SectionProvider, probes: tuple[Probe, ...] = PROBES) -> str:
    """
    identify the compiler, and when possible its version, using the first probe that finds evidence.
    returns "unknown" if none of them do.
    """
    for probe in probes:
        try:
            result = probe(sections)
        except Exception as e:
            # a garbled binary shouldn't stop the remaining probes.
            logger.warning("Error detecting compiler via %s: %s", probe.__name__, e)
            continue

        logger.debug("probe: %s: %s", probe.__name__, result)
        if result:
            return result

    return UNKNOWN


def detect_elf_compiler(elf: ELFFile) -> str:
    return detect_compiler(ElfSectionProvider(elf))
