"""Line-level diff engine.

Implements Myers' O(N*D) shortest-edit-script search over lines in its
linear-space form (middle snake, divide and conquer).
Lines are split on ``\\n`` only and compared together with whether they were
newline-terminated, so that ``"a"`` and ``"a\\n"`` are different texts.

Output conventions:
    * deterministic: the same inputs always give the same script;
    * within each run of changes between two EQUAL lines, all deletions come
      before all insertions;
    * total: any two strings (including empty ones) produce a script.
"""

from __future__ import annotations

from revwatch.errors import DiffApplyError
from revwatch.models.diff import DiffHunk, DiffLine, DiffScript, DiffTag

# (text, terminated-by-newline)
_Line = tuple[str, bool]
# (tag, old index or -1, new index or -1)
_Op = tuple[DiffTag, int, int]


def split_lines(text: str) -> list[_Line]:
    """Split *text* into ``(line, newline)`` pairs.

    A trailing newline terminates the last line rather than opening an empty
    one; a final unterminated line is kept with ``newline=False``.
    """
    if not text:
        return []
    parts = text.split("\n")
    tail = parts.pop()
    lines = [(part, True) for part in parts]
    if tail:
        lines.append((tail, False))
    return lines


def compute(old_text: str, new_text: str) -> DiffScript:
    """Compute the minimal line-level edit script from *old_text* to *new_text*."""
    old = split_lines(old_text)
    new = split_lines(new_text)

    # Trim the common prefix and suffix; only the middle needs searching.
    prefix = 0
    limit = min(len(old), len(new))
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    suffix = 0
    while suffix < limit - prefix and old[-1 - suffix] == new[-1 - suffix]:
        suffix += 1

    ops: list[_Op] = [(DiffTag.EQUAL, i, i) for i in range(prefix)]
    middle = _myers(old[prefix : len(old) - suffix], new[prefix : len(new) - suffix])
    ops.extend((tag, i + prefix if i >= 0 else -1, j + prefix if j >= 0 else -1) for tag, i, j in middle)
    ops.extend(
        (DiffTag.EQUAL, len(old) - suffix + n, len(new) - suffix + n) for n in range(suffix)
    )

    return DiffScript(lines=tuple(_to_lines(_group_changes(ops), old, new)))


def _myers(a: list[_Line], b: list[_Line]) -> list[_Op]:
    """Return a minimal list of edit ops for *a* -> *b*.

    Lines that occur on only one side can never be matched, so the search
    runs over the lines the two sides share; the rest become plain deletions
    and insertions between the matched pairs.  A total rewrite therefore
    costs no search at all.
    """
    common = set(a).intersection(b)
    a_idx = [i for i, line in enumerate(a) if line in common]
    b_idx = [j for j, line in enumerate(b) if line in common]

    matches: list[tuple[int, int]] = []
    if a_idx and b_idx:
        ra = [a[i] for i in a_idx]
        rb = [b[j] for j in b_idx]
        reduced: list[_Op] = []
        _diff_range(ra, rb, 0, len(ra), 0, len(rb), reduced)
        matches = [(a_idx[i], b_idx[j]) for tag, i, j in reduced if tag is DiffTag.EQUAL]

    ops: list[_Op] = []
    x = y = 0
    for i, j in matches:
        ops.extend((DiffTag.DELETE, k, -1) for k in range(x, i))
        ops.extend((DiffTag.INSERT, -1, k) for k in range(y, j))
        ops.append((DiffTag.EQUAL, i, j))
        x, y = i + 1, j + 1
    ops.extend((DiffTag.DELETE, k, -1) for k in range(x, len(a)))
    ops.extend((DiffTag.INSERT, -1, k) for k in range(y, len(b)))
    return ops


def _diff_range(
    a: list[_Line],
    b: list[_Line],
    a_lo: int,
    a_hi: int,
    b_lo: int,
    b_hi: int,
    ops: list[_Op],
) -> None:
    """Append the ops for ``a[a_lo:a_hi]`` -> ``b[b_lo:b_hi]`` to *ops*.

    Divide and conquer on the middle snake: memory stays linear in the input
    size and recursion depth is logarithmic in the edit distance.
    """
    while a_lo < a_hi and b_lo < b_hi and a[a_lo] == b[b_lo]:
        ops.append((DiffTag.EQUAL, a_lo, b_lo))
        a_lo += 1
        b_lo += 1
    tail = 0
    while a_lo < a_hi - tail and b_lo < b_hi - tail and a[a_hi - 1 - tail] == b[b_hi - 1 - tail]:
        tail += 1
    a_end, b_end = a_hi - tail, b_hi - tail

    split: tuple[int, int] | None = None
    if a_lo < a_end and b_lo < b_end:
        split = _middle_snake(a, b, a_lo, a_end, b_lo, b_end)
    if split is None:
        # One side is empty, or the two ranges share no line at all.
        ops.extend((DiffTag.DELETE, i, -1) for i in range(a_lo, a_end))
        ops.extend((DiffTag.INSERT, -1, j) for j in range(b_lo, b_end))
    else:
        x, y = split
        _diff_range(a, b, a_lo, x, b_lo, y, ops)
        _diff_range(a, b, x, a_end, y, b_end, ops)

    ops.extend((DiffTag.EQUAL, a_end + n, b_end + n) for n in range(tail))


def _middle_snake(
    a: list[_Line],
    b: list[_Line],
    a_lo: int,
    a_hi: int,
    b_lo: int,
    b_hi: int,
) -> tuple[int, int] | None:
    """Find a point on a shortest edit path through the given ranges.

    Runs the forward and reverse Myers searches together until their
    furthest-reaching paths overlap.  Returns None when the ranges have no
    line in common, in which case delete-all then insert-all is minimal.
    Callers trim equal prefixes and suffixes first, so the returned point
    always splits the problem into two strictly smaller ones.
    """
    n = a_hi - a_lo
    m = b_hi - b_lo
    delta = n - m
    odd = delta % 2 == 1
    max_d = (n + m + 1) // 2
    offset = max_d
    size = 2 * max_d + 2
    fwd = [-1] * size
    rev = [-1] * size
    fwd[offset + 1] = 0
    rev[offset + 1] = 0
    # Diagonals that ran off the edit graph are skipped from then on.
    fwd_lo = fwd_hi = rev_lo = rev_hi = 0

    for d in range(max_d):
        for k in range(-d + fwd_lo, d + 1 - fwd_hi, 2):
            i = offset + k
            if k == -d or (k != d and fwd[i - 1] < fwd[i + 1]):
                x = fwd[i + 1]
            else:
                x = fwd[i - 1] + 1
            y = x - k
            while x < n and y < m and a[a_lo + x] == b[b_lo + y]:
                x += 1
                y += 1
            fwd[i] = x
            if x > n:
                fwd_hi += 2
            elif y > m:
                fwd_lo += 2
            elif odd:
                j = offset + delta - k
                if 0 <= j < size and rev[j] != -1 and x >= n - rev[j]:
                    return a_lo + x, b_lo + y

        for k in range(-d + rev_lo, d + 1 - rev_hi, 2):
            i = offset + k
            if k == -d or (k != d and rev[i - 1] < rev[i + 1]):
                x = rev[i + 1]
            else:
                x = rev[i - 1] + 1
            y = x - k
            while x < n and y < m and a[a_hi - 1 - x] == b[b_hi - 1 - y]:
                x += 1
                y += 1
            rev[i] = x
            if x > n:
                rev_hi += 2
            elif y > m:
                rev_lo += 2
            elif not odd:
                j = offset + delta - k
                if 0 <= j < size and fwd[j] != -1:
                    fx = fwd[j]
                    if fx >= n - x:
                        return a_lo + fx, b_lo + fx - (j - offset)

    return None


def _group_changes(ops: list[_Op]) -> list[_Op]:
    """Reorder each run of changes so deletions precede insertions."""
    grouped: list[_Op] = []
    deletes: list[_Op] = []
    inserts: list[_Op] = []
    for op in ops:
        if op[0] is DiffTag.DELETE:
            deletes.append(op)
        elif op[0] is DiffTag.INSERT:
            inserts.append(op)
        else:
            grouped.extend(deletes)
            grouped.extend(inserts)
            deletes.clear()
            inserts.clear()
            grouped.append(op)
    grouped.extend(deletes)
    grouped.extend(inserts)
    return grouped


def _to_lines(ops: list[_Op], old: list[_Line], new: list[_Line]) -> list[DiffLine]:
    lines: list[DiffLine] = []
    for tag, i, j in ops:
        if tag is DiffTag.INSERT:
            text, newline = new[j]
            lines.append(DiffLine(tag=tag, text=text, newline=newline, new_lineno=j + 1))
        elif tag is DiffTag.DELETE:
            text, newline = old[i]
            lines.append(DiffLine(tag=tag, text=text, newline=newline, old_lineno=i + 1))
        else:
            # Equal lines compare equal including the newline flag.
            text, newline = old[i]
            lines.append(DiffLine(tag=tag, text=text, newline=newline, old_lineno=i + 1, new_lineno=j + 1))
    return lines


def apply_script(old_text: str, script: DiffScript) -> str:
    """Replay *script* against *old_text* and return the resulting text.

    Raises DiffApplyError when an EQUAL or DELETE line does not match the
    corresponding line of *old_text*.
    """
    old = split_lines(old_text)
    pos = 0
    out: list[str] = []
    for line in script:
        if line.tag is not DiffTag.INSERT:
            if pos >= len(old) or old[pos] != (line.text, line.newline):
                raise DiffApplyError(f"script does not match old text at line {pos + 1}")
            pos += 1
        if line.tag is not DiffTag.DELETE:
            out.append(line.text + "\n" if line.newline else line.text)
    if pos != len(old):
        raise DiffApplyError(f"script covers {pos} of {len(old)} old lines")
    return "".join(out)


def hunks(script: DiffScript, context: int = 3) -> list[DiffHunk]:
    """Group *script* into unified-diff hunks with *context* lines around changes."""
    lines = script.lines
    ranges: list[list[int]] = []
    for idx, line in enumerate(lines):
        if line.tag is DiffTag.EQUAL:
            continue
        start = max(0, idx - context)
        end = min(len(lines), idx + context + 1)
        if ranges and start <= ranges[-1][1]:
            ranges[-1][1] = max(ranges[-1][1], end)
        else:
            ranges.append([start, end])

    result: list[DiffHunk] = []
    for start, end in ranges:
        body = lines[start:end]
        old_before = sum(1 for line in lines[:start] if line.tag is not DiffTag.INSERT)
        new_before = sum(1 for line in lines[:start] if line.tag is not DiffTag.DELETE)
        old_count = sum(1 for line in body if line.tag is not DiffTag.INSERT)
        new_count = sum(1 for line in body if line.tag is not DiffTag.DELETE)
        result.append(
            DiffHunk(
                old_start=old_before + 1 if old_count else old_before,
                old_count=old_count,
                new_start=new_before + 1 if new_count else new_before,
                new_count=new_count,
                lines=body,
            )
        )
    return result
