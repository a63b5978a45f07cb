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

import abc
import logging
from typing import Optional

from elftools.elf.elffile import ELFFile

logger = logging.getLogger(__name__)


def get_section_data(elf: ELFFile, name: str) -> Optional[bytes]:
    """
    fetch the raw contents of the section with the given name.

    returns None when the section doesn't exist *or* when its contents can't be read,
    such as a truncated or badly compressed section.
    the two cases are intentionally indistinguishable: either way, there's no evidence here.
    """
    try:
        section = elf.get_section_by_name(name)
    except Exception as e:
        logger.debug("failed to look up section %s: %s", name, e)
        return None

    if section is None:
        return None

    try:
        return bytes(section.data())
    except Exception as e:
        logger.debug("failed to read section %s: %s", name, e)
        return None


def has_section(elf: ELFFile, name: str) -> bool:
    try:
        return elf.get_section_by_name(name) is not None
    except Exception as e:
        logger.debug("failed to look up section %s: %s", name, e)
        return False


class SectionProvider(abc.ABC):
    """
    source of section contents for the compiler probes.

    probes only ever ask two questions: what bytes does a section hold, and does it exist.
    this lets the probes run against anything that can answer them, not just a parsed ELF file.
    """

    @abc.abstractmethod
    def get_section_data(self, name: str) -> Optional[bytes]:
        """
        fetch the contents of the named section, or None if it's missing or unreadable.
        must not raise.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    def has_section(self, name: str) -> bool:
        raise NotImplementedError()


class ElfSectionProvider(SectionProvider):
    def __init__(self, elf: ELFFile):
        super().__init__()
        self.elf = elf

    def get_section_data(self, name: str) -> Optional[bytes]:
        return get_section_data(self.elf, name)

    def has_section(self, name: str) -> bool:
        return has_section(self.elf, name)
