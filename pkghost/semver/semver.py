# pkghost/semver/semver.py
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Literal

__all__ = [
    "SemVer", "SemVerComparator", "SemVerComparatorSet", "SemVerRange",
    "parseSemVer", "parseSemVerRange", "versionSatisfiesRange", "satisfies",
]



SEMVER_PATTERN_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)"
    r"\.(?P<minor>0|[1-9]\d*)"
    r"\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|[0-9A-Za-z-]*[A-Za-z-][0-9A-Za-z-]*)"
    r"(?:\.(?:0|[1-9]\d*|[0-9A-Za-z-]*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

_WILDCARDS = ("x", "X", "*")

# Collapse "op  version" into "opversion" so ">= 1.2.0" tokenizes like ">=1.2.0"
_OPERATOR_SPACING_RE = re.compile(r"(<=|>=|<|>|=|\^|~)\s+")



@total_ordering
@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        prerelease = f"-{'.'.join(self.prerelease)}" if self.prerelease else ""
        build = f"+{'.'.join(self.build)}" if self.build else ""
        return f"{base}{prerelease}{build}"

    @property
    def release(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def _prereleaseCmpKey(self) -> tuple:
        # Numeric identifiers have lower precedence than non-numeric.
        # We encode numeric as (0, int), non-numeric as (1, str),
        # so numeric < non-numeric in tuple comparison.
        parts: list[tuple[int, int | str]] = []
        for ident in self.prerelease:
            if ident.isdigit():
                parts.append((0, int(ident)))
            else:
                parts.append((1, ident))
        return tuple(parts)

    def _cmpKey(self) -> tuple:
        # Build is ignored for ordering
        # No prerelease version is preferred over any prerelease version
        releaseFlag = 1 if not self.prerelease else 0
        return (
            self.major,
            self.minor,
            self.patch,
            releaseFlag,
            self._prereleaseCmpKey()
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._cmpKey() == other._cmpKey()

    def __hash__(self) -> int:
        return hash(self._cmpKey())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._cmpKey() < other._cmpKey()



def parseSemVer(raw: str) -> SemVer:
    """
    Parse a full semantic version string into SemVer.

    Accepted forms (examples):
        "1.2.3"
        "1.2.3-alpha.1"
        "1.2.3+build.1"
        "v1.2.3"

    Rejected:
        "1", "1.2", "1.2.3.4", "01.2.3" (leading zeroes), "1.x", etc.
    """
    if raw is None:
        raise ValueError("Version string cannot be None")

    if not isinstance(raw, str):
        raise TypeError(f"Version string must be a string type, got {type(raw).__name__}")

    raw = raw.strip()
    if not raw:
        raise ValueError("Version string cannot be empty or whitespace only")

    mtch = SEMVER_PATTERN_RE.match(raw)
    if not mtch:
        raise ValueError(f"Invalid semantic version {raw!r}")

    prereleaseGroup = mtch.group("prerelease")
    buildGroup = mtch.group("build")

    return SemVer(
        major=int(mtch.group("major")),
        minor=int(mtch.group("minor")),
        patch=int(mtch.group("patch")),
        prerelease=tuple(prereleaseGroup.split(".")) if prereleaseGroup else (),
        build=tuple(buildGroup.split(".")) if buildGroup else (),
    )



@dataclass(frozen=True)
class _Partial:
    """A possibly incomplete version as written inside a range ("1", "1.2", "1.x")."""
    major: int | None
    minor: int | None
    patch: int | None
    prerelease: tuple[str, ...] = ()

    def floor(self) -> SemVer:
        return SemVer(self.major or 0, self.minor or 0, self.patch or 0, self.prerelease)

    @property
    def isFull(self) -> bool:
        return self.major is not None and self.minor is not None and self.patch is not None



def _parsePartial(raw: str, rawRange: str) -> _Partial:
    if not raw:
        raise ValueError(f"Missing version in range {rawRange!r}")

    if raw.startswith("v") and len(raw) > 1 and "0" <= raw[1] <= "9":
        raw = raw[1:]

    sepIndex = len(raw)
    for ch in ("-", "+"):
        idx = raw.find(ch)
        if idx != -1 and idx < sepIndex:
            sepIndex = idx
    core = raw[:sepIndex]
    suffix = raw[sepIndex:]

    coreParts = core.split(".")
    if not 1 <= len(coreParts) <= 3 or any(part == "" for part in coreParts):
        raise ValueError(f"Invalid version {raw!r} in range {rawRange!r}")

    numbers: list[int | None] = []
    for part in coreParts:
        if part in _WILDCARDS:
            numbers.append(None)
            continue
        if numbers and numbers[-1] is None:
            raise ValueError(f"Version component after wildcard in {raw!r}")
        if not re.fullmatch(r"0|[1-9]\d*", part):
            raise ValueError(f"Invalid numeric component {part!r} in range {rawRange!r}")
        numbers.append(int(part))
    while len(numbers) < 3:
        numbers.append(None)

    prerelease: tuple[str, ...] = ()
    if suffix:
        if None in numbers:
            raise ValueError(f"Prerelease/build suffix on partial version {raw!r}")
        full = parseSemVer(f"{numbers[0]}.{numbers[1]}.{numbers[2]}{suffix}")
        prerelease = full.prerelease

    return _Partial(numbers[0], numbers[1], numbers[2], prerelease)



@dataclass(frozen=True)
class SemVerComparator:
    operator: Literal["<", "<=", ">", ">=", "=="]
    version: SemVer

    def test(self, version: SemVer) -> bool:
        if self.operator == "==":
            return version == self.version
        if self.operator == ">=":
            return version >= self.version
        if self.operator == "<=":
            return version <= self.version
        if self.operator == ">":
            return version > self.version
        if self.operator == "<":
            return version < self.version
        raise ValueError(f"Unknown operator {self.operator!r}")



@dataclass(frozen=True)
class SemVerComparatorSet:
    # All comparators are AND-ed. Empty means "any version".
    comparators: tuple[SemVerComparator, ...] = ()

    def test(self, version: SemVer) -> bool:
        for comparator in self.comparators:
            if not comparator.test(version):
                return False

        if not version.prerelease:
            return True

        # A prerelease only matches when some comparator opts into prereleases
        # of the very same major.minor.patch tuple ("^1.2.3-beta" admits "1.2.3-rc.1").
        for comparator in self.comparators:
            if comparator.version.prerelease and comparator.version.release == version.release:
                return True
        return False



@dataclass(frozen=True)
class SemVerRange:
    # Alternatives are OR-ed ("^1.0.0 || ^2.0.0").
    alternatives: tuple[SemVerComparatorSet, ...]

    def test(self, version: SemVer) -> bool:
        return any(alternative.test(version) for alternative in self.alternatives)



def _bump(partial: _Partial) -> SemVer:
    """Smallest version above everything `partial` covers ("1.2" -> 1.3.0, "1" -> 2.0.0)."""
    major = partial.major or 0
    if partial.minor is None:
        return SemVer(major + 1, 0, 0)
    if partial.patch is None:
        return SemVer(major, partial.minor + 1, 0)
    return SemVer(major, partial.minor, partial.patch + 1)



def _xRange(partial: _Partial) -> list[SemVerComparator]:
    """
    "1.2.3" -> == 1.2.3
    "1.2"   -> >= 1.2.0 and < 1.3.0
    "1"     -> >= 1.0.0 and < 2.0.0
    "*"     -> any
    """
    if partial.major is None:
        return []
    if partial.isFull:
        return [SemVerComparator("==", partial.floor())]
    return [SemVerComparator(">=", partial.floor()), SemVerComparator("<", _bump(partial))]



def _caret(partial: _Partial) -> list[SemVerComparator]:
    """
    ^M.m.p -> caret expansion following SemVer semantics:

    - If M > 0:                  >= M.m.p  and  < (M+1).0.0
    - If M == 0 and m > 0:       >= 0.m.p  and  < 0.(m+1).0
    - If M == 0 and m == 0:      >= 0.0.p  and  < 0.0.(p+1)
    - Missing parts widen the range the same way x-ranges do (^0.0 -> < 0.1.0).
    """
    if partial.major is None:
        return []
    major, minor, patch = partial.major, partial.minor, partial.patch
    if major > 0 or minor is None:
        upper = SemVer(major + 1, 0, 0)
    elif minor > 0 or patch is None:
        upper = SemVer(0, minor + 1, 0)
    else:
        upper = SemVer(0, 0, patch + 1)
    return [SemVerComparator(">=", partial.floor()), SemVerComparator("<", upper)]



def _tilde(partial: _Partial) -> list[SemVerComparator]:
    """
    ~M.m.p -> >= M.m.p and < M.(m+1).0
    ~M     -> >= M.0.0 and < (M+1).0.0
    """
    if partial.major is None:
        return []
    if partial.minor is None:
        upper = SemVer(partial.major + 1, 0, 0)
    else:
        upper = SemVer(partial.major, partial.minor + 1, 0)
    return [SemVerComparator(">=", partial.floor()), SemVerComparator("<", upper)]



def _primitive(op: str, partial: _Partial) -> list[SemVerComparator]:
    if op == "=":
        return _xRange(partial)
    if partial.major is None:
        # ">=*" still means any; "<*" / ">*" can never match
        if op in (">=", "<="):
            return []
        return [SemVerComparator("<", SemVer(0, 0, 0, ("0",)))]
    if partial.isFull:
        return [SemVerComparator(op, partial.floor())]  # type: ignore[arg-type]
    if op == ">=":
        return [SemVerComparator(">=", partial.floor())]
    if op == ">":
        return [SemVerComparator(">=", _bump(partial))]
    if op == "<":
        return [SemVerComparator("<", partial.floor())]
    # "<=1.2" admits every 1.2.x
    return [SemVerComparator("<", _bump(partial))]



def _parseComparatorSet(raw: str, rawRange: str) -> SemVerComparatorSet:
    raw = raw.strip()
    if not raw:
        return SemVerComparatorSet()

    # Hyphen range: <left> - <right>
    # e.g. "1.2.3 - 2.0.0", "1 - 2.0.0", "0.1 - 0.2"
    mtch = re.match(r"^(?P<left>\S+)\s+-\s+(?P<right>\S+)$", raw)
    if mtch:
        left = _parsePartial(mtch.group("left"), rawRange)
        right = _parsePartial(mtch.group("right"), rawRange)
        comparators: list[SemVerComparator] = []
        if left.major is not None:
            comparators.append(SemVerComparator(">=", left.floor()))
        if right.major is not None:
            if right.isFull:
                comparators.append(SemVerComparator("<=", right.floor()))
            else:
                comparators.append(SemVerComparator("<", _bump(right)))
        if len(comparators) == 2 and comparators[1].version < comparators[0].version:
            raise ValueError(f"Invalid hyphen range {raw!r}: upper < lower")
        return SemVerComparatorSet(tuple(comparators))

    comparators = []
    for token in _OPERATOR_SPACING_RE.sub(r"\1", raw).split():
        if token[0] in ("^", "~"):
            body = token[2:] if token.startswith("~>") else token[1:]
            partial = _parsePartial(body, rawRange)
            comparators.extend(_caret(partial) if token[0] == "^" else _tilde(partial))
            continue

        op = None
        for candidate in ("<=", ">=", "==", "<", ">", "="):
            if token.startswith(candidate):
                op = candidate
                break
        if op is not None:
            partial = _parsePartial(token[len(op):], rawRange)
            comparators.extend(_primitive("=" if op == "==" else op, partial))
            continue

        comparators.extend(_xRange(_parsePartial(token, rawRange)))

    return SemVerComparatorSet(tuple(comparators))



def parseSemVerRange(rawRange: str | None) -> SemVerRange:
    """
    Parse an npm-style range string into SemVerRange.

    Accepted forms:

        None, "", "*", "x"      -> any version

        "1.2.3"                 -> == 1.2.3
        "1.2" / "1.2.x"         -> >= 1.2.0 AND < 1.3.0
        ">=1.2.0 <2.0.0"        -> >= 1.2.0 AND < 2.0.0

        "^1.2.3"                -> >= 1.2.3 AND < 2.0.0 (with 0.x semantics)
        "~1.2.3"                -> >= 1.2.3 AND < 1.3.0

        "1.2.3 - 2.0.0"         -> >= 1.2.3 AND <= 2.0.0
        "^1.0.0 || ^2.0.0"      -> either alternative

    Raises ValueError on malformed input.
    """
    if rawRange is None:
        return SemVerRange((SemVerComparatorSet(),))
    if not isinstance(rawRange, str):
        raise TypeError(f"Range must be a string or None, got {type(rawRange).__name__}")

    alternatives = tuple(_parseComparatorSet(part, rawRange) for part in rawRange.split("||"))
    return SemVerRange(alternatives)



def versionSatisfiesRange(version: SemVer, versionRange: SemVerRange | None) -> bool:
    """requirement None => always True."""
    if versionRange is None:
        return True
    return versionRange.test(version)



def satisfies(version: str, rawRange: str | None) -> bool:
    """
    String-level comparator used for host compatibility checks.

    Like npm's semver.satisfies(), an unparsable version or range never
    satisfies anything instead of raising.
    """
    try:
        parsedVersion = parseSemVer(version)
        parsedRange = parseSemVerRange(rawRange)
    except (TypeError, ValueError):
        return False
    return versionSatisfiesRange(parsedVersion, parsedRange)
