import posixpath
import re
from typing import Iterable

import pathspec


EXTERNAL_URL_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:)?//", re.IGNORECASE)


def build_exclude_spec(patterns: Iterable[str]) -> "pathspec.PathSpec":
    """
    Return a pathspec.PathSpec built with the 'gitwildmatch' syntax (same as
    Git) from the configured exclusion patterns.
    """
    lines = [p.strip() for p in patterns if p and p.strip()]
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def is_excluded(url: str, spec: "pathspec.PathSpec") -> bool:
    """
    Return True if the package-relative *url* is matched by *spec*.
    """
    return spec.match_file(url)


def is_external_url(url: str) -> bool:
    return bool(EXTERNAL_URL_RE.match(url))


def declarations_filename(url: str, extension: str = ".d.ts") -> str:
    """
    Replace the extension of *url* with the declaration extension:
    ``src/foo.html`` -> ``src/foo.d.ts``.
    """
    root, _ext = posixpath.splitext(url)
    return root + extension


def relative_reference(from_file: str, to_file: str) -> str:
    """
    Return the path of *to_file* relative to the directory containing
    *from_file*. Both are package-relative posix paths.
    """
    start = posixpath.dirname(from_file) or "."
    return posixpath.relpath(posixpath.normpath(to_file), start)


def unstage_dependency_url(url: str, staged_dirs: Iterable[str]) -> str:
    """
    Rewrite ``bower_components/foo/foo.html`` to ``../foo/foo.html``.

    During analysis dependencies live in a staging directory inside the
    package, but once the package is itself installed they are siblings.
    """
    for staged in staged_dirs:
        prefix = staged.rstrip("/") + "/"
        if url.startswith(prefix):
            return "../" + url[len(prefix):]
    return url


def kebab_to_pascal(s: str) -> str:
    """Convert kebab-case to PascalCase: ``my-widget`` -> ``MyWidget``."""
    return re.sub(r"(^|-)(.)", lambda m: m.group(2).upper(), s)
