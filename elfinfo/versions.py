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

import re

# an optional sign followed by ASCII digits, nothing else.
# stricter than `int()`, which also accepts whitespace, underscores and non-ASCII digits.
INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_component(part: str) -> int:
    """
    parse one dot-separated component of a version string.
    anything that isn't a plain integer counts as less than nothing (-1).
    """
    if INTEGER.fullmatch(part):
        return int(part)
    return -1


def version_sum(parts: list[str]) -> int:
    """
    sum the components of a version number, with more weight on the earlier ones.
    the leftmost of L components is weighted 10**(L-1), so "2.0.0.0" sums to 2000.

    note: this is an approximation, not a semantic version ordering.
    components >= 10 at non-leading positions bleed into their neighbors,
    e.g. "1.10" sums to 20 which is the same as "2.0".
    """
    length = len(parts)
    return sum(parse_component(part) * 10 ** (length - 1 - i) for i, part in enumerate(parts))


def first_is_greater(a: str, b: str) -> bool:
    """
    is version `a` strictly greater than version `b`?

    the shorter version is right-padded with "0" components so that both have the same length,
    so "2.0" and "2.0.0" are equal.
    non-numeric components count as less than "0", so "1.0.0" > "1.0.x".
    """
    a_parts = a.split(".")
    b_parts = b.split(".")

    length = max(len(a_parts), len(b_parts))
    a_parts += ["0"] * (length - len(a_parts))
    b_parts += ["0"] * (length - len(b_parts))

    return version_sum(a_parts) > version_sum(b_parts)
