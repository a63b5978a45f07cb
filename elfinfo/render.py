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

import json
from typing import Iterable

from rich.text import Text

from elfinfo.loader import ElfInfo


def bold(s: str) -> Text:
    """draw attention to the given string"""
    # not Text.from_markup: labels may contain raw section text with square brackets.
    return Text(s, style="cyan")


def mute(s: str) -> Text:
    """draw attention away from the given string"""
    return Text(s, style="dim")


def render_default(info: ElfInfo) -> Text:
    """
    one line summarizing the file, like:

        /bin/ls: stripped=True, compiler=GCC 6.3.1, static=False, byteorder=LE, machine=Advanced Micro Devices X86-64
    """
    ret = Text()
    ret.append(f"{info.path}: stripped={info.stripped}, compiler=")
    ret.append_text(bold(info.compiler))
    ret.append(f", static={info.static}, byteorder={info.byteorder}, machine=")
    ret.append_text(mute(info.machine))
    return ret


def render_compiler(compiler: str) -> Text:
    return bold(compiler)


def render_json(infos: Iterable[ElfInfo]) -> str:
    return json.dumps([info.model_dump() for info in infos])
