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

from elftools.elf.elffile import ELFFile, DynamicSegment
from elftools.elf.descriptions import describe_e_machine

logger = logging.getLogger(__name__)


def is_stripped(elf: ELFFile) -> bool:
    """
    does the file lack a usable symbol table?
    a symbol table that's present but can't be read counts as stripped, too.
    """
    try:
        symtab = next((s for s in elf.iter_sections() if s["sh_type"] == "SHT_SYMTAB"), None)
    except Exception as e:
        logger.debug("failed to enumerate sections: %s", e)
        return True

    if symtab is None:
        # executable does not contain a symbol table
        return True

    entsize = symtab["sh_entsize"]
    if entsize == 0:
        logger.debug("symbol table '%s' has a sh_entsize of zero!", symtab.name)
        return True

    try:
        buf = symtab.data()
    except Exception as e:
        logger.debug("failed to read symbol table '%s': %s", symtab.name, e)
        return True

    if len(buf) == 0 or len(buf) % entsize != 0:
        logger.debug("symbol table '%s' has an invalid size: 0x%x", symtab.name, len(buf))
        return True

    return False


def is_static(elf: ELFFile) -> bool:
    """
    is the file statically linked?
    that is: it requests neither a program interpreter (dynamic linker) nor any shared libraries.
    """
    try:
        segments = list(elf.iter_segments())
    except Exception as e:
        logger.debug("failed to enumerate program headers: %s", e)
        return True

    for segment in segments:
        if segment.header.p_type == "PT_INTERP":
            logger.debug("found PT_INTERP at 0x%x", segment.header.p_offset)
            return False

    for segment in segments:
        if not isinstance(segment, DynamicSegment):
            continue

        try:
            for tag in segment.iter_tags():
                if tag.entry.d_tag == "DT_NEEDED":
                    logger.debug("found DT_NEEDED: %s", getattr(tag, "needed", "?"))
                    return False
        except Exception as e:
            logger.debug("failed to parse dynamic segment: %s", e)

    return True


def get_byteorder(elf: ELFFile) -> str:
    return "LE" if elf.little_endian else "BE"


def get_machine(elf: ELFFile) -> str:
    """the human readable name of the target architecture, like "Advanced Micro Devices X86-64" """
    return describe_e_machine(elf["e_machine"])
