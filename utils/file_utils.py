# MIT License
#
# Copyright (c) 2018 Evgeny Medvedev, evge.medvedev@gmail.com
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Modified By: Cuong CT, 6/12/2025
# Change Description: None and "-" both map to the standard streams.

import contextlib
import pathlib
import sys
from typing import IO, Any, Generator, Iterator, Optional, Union


# https://stackoverflow.com/questions/17602878/how-to-handle-both-with-open-and-sys-stdout-nicely
@contextlib.contextmanager
def smart_open(
    filename: Union[str, pathlib.Path, None] = None,
    mode: str = "w",
    binary: bool = False,
    create_parent_dirs: bool = True,
) -> Generator[IO[Any], None, None]:
    is_file = filename is not None and str(filename) != "-"
    full_mode = mode + ("b" if binary else "")
    fh: Optional[IO[Any]] = None
    should_close = False

    try:
        if is_file:
            path = pathlib.Path(filename)
            if create_parent_dirs and "w" in mode:
                path.parent.mkdir(parents=True, exist_ok=True)
            fh = open(path, full_mode)
            should_close = True
        else:
            # Yield the system stream directly, closing it would close stdout/stdin.
            if "w" in mode or "a" in mode:
                fh = sys.stdout.buffer if binary else sys.stdout
            else:
                fh = sys.stdin.buffer if binary else sys.stdin

        yield fh

    finally:
        if should_close and fh is not None:
            fh.close()


def read_address_lines(fh: IO[str]) -> Iterator[str]:
    """Yields one stripped entry per line, skipping blank lines and # comments."""
    for line in fh:
        entry = line.split("#", 1)[0].strip()
        if entry:
            yield entry
