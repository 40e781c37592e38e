"""Include Directive Scanner.

Extracts header references from C/C++/CUDA source text.

Design:
    This is a textual scan, not a preprocessor. Every ``#include`` line is a
    dependency whether or not it sits inside an inactive ``#ifdef`` block, so
    the scanner may report headers that are never compiled in. Extra
    references can only cause an unneeded rebuild, never a missed one.

Example:
    >>> extract_includes('#include <stdio.h>\\n#include "custom.h"\\n')
    ['stdio.h', 'custom.h']
"""

from typing import List, Optional

INCLUDE_KEYWORD = "#include"

# Opening delimiter -> closing delimiter
_DELIMITERS = {'"': '"', "<": ">"}


def parse_include(line: str) -> Optional[str]:
    """Parse a single include directive.

    Leading whitespace is allowed; anything else before ``#include``
    disqualifies the line. The quoting style is decided by whichever of
    ``"`` or ``<`` appears first after the keyword.

    Args:
        line: One line of source text

    Returns:
        The header reference between the delimiters, or None if the line is
        not an include directive or is missing its closing delimiter
    """
    line = line.lstrip()
    if not line.startswith(INCLUDE_KEYWORD):
        return None

    close = None
    start = -1
    for index, char in enumerate(line):
        if char in _DELIMITERS:
            close = _DELIMITERS[char]
            start = index + 1
            break

    if close is None:
        return None

    end = line.find(close, start)
    if end < 0:
        return None

    return line[start:end]


def extract_includes(content: str) -> List[str]:
    """Extract all header references from source text.

    References are returned in first-occurrence order. Duplicates are kept.
    Malformed directives are skipped silently.

    Args:
        content: Full source file content

    Returns:
        List of header references (e.g. ``["stdio.h", "sub/dir.h"]``)
    """
    includes: List[str] = []

    for line in content.split("\n"):
        # Cheap substring check before the real parse
        if INCLUDE_KEYWORD not in line:
            continue
        dep = parse_include(line)
        if dep is not None:
            includes.append(dep)

    return includes
