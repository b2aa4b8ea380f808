# config.py - Reading and writing Git config files
# Copyright (C) 2026 The mygit contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# mygit is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#


"""Reading and writing Git configuration files.

Settings are addressed by ``(section[, subsection])`` and variable name.
Section and variable names are case insensitive; subsection names are not.
Only the parts of the format mygit needs are understood: sections,
subsections, comments, quoted values with escapes and line continuations.
Includes are not supported.
"""

__all__ = [
    "Config",
    "ConfigFile",
    "StackedConfig",
    "user_config_paths",
]

import os
from collections.abc import Sequence
from typing import IO, Optional, Union

from .errors import InvalidConfig
from .file import GitFile

Section = tuple[bytes, ...]
SectionLike = Union[bytes, str, tuple[Union[bytes, str], ...]]
NameLike = Union[bytes, str]

_BOM = b"\xef\xbb\xbf"
_BACKSLASH = ord(b"\\")
_QUOTE = ord(b'"')
_COMMENT_CHARS = b"#;"
_WHITESPACE = b" \t"

# escape letter -> the byte it stands for
_UNESCAPES = {
    ord(b"\\"): b"\\",
    ord(b'"'): b'"',
    ord(b"n"): b"\n",
    ord(b"t"): b"\t",
    ord(b"b"): b"\b",
    ord(b"r"): b"\r",
}
_ESCAPES = {value[0]: b"\\" + bytes([letter]) for letter, value in _UNESCAPES.items()}


def _encode(value: Union[bytes, str]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def _section_key(section: SectionLike) -> Section:
    if not isinstance(section, tuple):
        section = (section,)
    name, *subsection = (_encode(part) for part in section)
    return (name.lower(), *subsection)


def _display_name(section: SectionLike, name: NameLike) -> str:
    parts = (*_section_key(section), _encode(name).lower())
    return b".".join(parts).decode("utf-8", "replace")


def _scan_unquoted(line: bytes, stop: bytes) -> Optional[int]:
    """Return the index of the first byte from ``stop`` outside double quotes."""
    quoted = False
    escaped = False
    for i, c in enumerate(line):
        if escaped:
            escaped = False
        elif c == _BACKSLASH:
            escaped = True
        elif c == _QUOTE:
            quoted = not quoted
        elif not quoted and c in stop:
            return i
    return None


def _strip_comment(line: bytes) -> bytes:
    end = _scan_unquoted(line, _COMMENT_CHARS)
    return line if end is None else line[:end]


def _unquote(raw: bytes) -> bytes:
    """Decode a raw value as written after ``=``.

    Quotes are removed, escapes expanded and a trailing comment dropped.
    Unquoted whitespace is kept only between other characters.
    """
    out = bytearray()
    pending = bytearray()
    quoted = False
    chars = iter(raw.strip())
    for c in chars:
        if c == _BACKSLASH:
            letter = next(chars, None)
            if letter is None:
                text = b"\\"
            elif letter in _UNESCAPES:
                text = _UNESCAPES[letter]
            else:
                raise InvalidConfig(
                    f"unknown escape sequence \\{chr(letter)} in {raw!r}"
                )
        elif c == _QUOTE:
            quoted = not quoted
            continue
        elif quoted:
            text = bytes([c])
        elif c in _COMMENT_CHARS:
            break
        elif c in _WHITESPACE:
            pending.append(c)
            continue
        else:
            text = bytes([c])
        out += pending
        pending.clear()
        out += text
    if quoted:
        raise InvalidConfig(f"missing closing quote in {raw!r}")
    return bytes(out)


def _escape(value: bytes) -> bytes:
    return b"".join(_ESCAPES.get(c, bytes([c])) for c in value)


def _quote(value: bytes) -> bytes:
    """Encode a value so that reading it back yields the same bytes."""
    if (
        value[:1] in (b" ", b"\t")
        or value[-1:] in (b" ", b"\t")
        or any(c in _COMMENT_CHARS for c in value)
    ):
        return b'"' + _escape(value) + b'"'
    return _escape(value)


def _valid_name(name: bytes, extra: bytes = b"-") -> bool:
    return bool(name) and all(c in extra or bytes([c]).isalnum() for c in name)


def _parse_section_header(line: bytes) -> tuple[Section, bytes]:
    """Parse a ``[section]`` line, returning the section and the rest of the line."""
    end = _scan_unquoted(line, b"]")
    if end is None:
        raise InvalidConfig(f"unterminated section header {line!r}")
    name, sep, subsection = line[1:end].partition(b" ")
    section: Section
    if sep:
        if len(subsection) < 2 or not (
            subsection.startswith(b'"') and subsection.endswith(b'"')
        ):
            raise InvalidConfig(f"invalid subsection {subsection!r}")
        section = (name, _unquote(subsection))
    else:
        name, dot, subsection = name.partition(b".")
        section = (name, subsection) if dot else (name,)
    if not _valid_name(name, b"-."):
        raise InvalidConfig(f"invalid section name {name!r}")
    return section, line[end + 1 :]


def _is_continued(value: bytes) -> bool:
    """Check whether a raw value line ends in an unescaped backslash."""
    if not value.endswith(b"\n"):
        return False
    content = value.rstrip(b"\r\n")
    return (len(content) - len(content.rstrip(b"\\"))) % 2 == 1


class Config:
    """A Git configuration."""

    def get(self, section: SectionLike, name: NameLike) -> bytes:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Section name, or tuple with section and subsection name
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        raise NotImplementedError(self.get)

    def get_boolean(
        self, section: SectionLike, name: NameLike, default: Optional[bool] = None
    ) -> Optional[bool]:
        """Retrieve a configuration setting as boolean.

        Returns:
          The setting, or default if it is not set
        Raises:
          InvalidConfig: if the value is not a boolean
        """
        try:
            value = self.get(section, name).lower()
        except KeyError:
            return default
        if value in (b"true", b"yes", b"on", b"1"):
            return True
        if value in (b"false", b"no", b"off", b"0", b""):
            return False
        raise InvalidConfig(
            f"bad boolean value {value!r} for {_display_name(section, name)}"
        )

    def get_int(
        self, section: SectionLike, name: NameLike, default: Optional[int] = None
    ) -> Optional[int]:
        """Retrieve a configuration setting as integer.

        Returns:
          The setting, or default if it is not set
        Raises:
          InvalidConfig: if the value is not a decimal integer
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise InvalidConfig(
                f"bad numeric value {value!r} for {_display_name(section, name)}"
            ) from exc


class ConfigFile(Config):
    """A Git configuration file, like .git/config or ~/.gitconfig."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self._values: dict[Section, dict[bytes, bytes]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigFile) and other._values == self._values

    def get(self, section: SectionLike, name: NameLike) -> bytes:
        return self._values[_section_key(section)][_encode(name).lower()]

    def set(
        self, section: SectionLike, name: NameLike, value: Union[bytes, str, bool]
    ) -> None:
        """Set a configuration value, replacing any earlier one."""
        if isinstance(value, bool):
            value = b"true" if value else b"false"
        section_values = self._values.setdefault(_section_key(section), {})
        section_values[_encode(name).lower()] = _encode(value)

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object.

        Raises:
          InvalidConfig: if the file is not valid git configuration
        """
        ret = cls()
        section: Optional[Section] = None
        continued: Optional[tuple[bytes, bytes]] = None
        for lineno, line in enumerate(f.readlines()):
            if lineno == 0 and line.startswith(_BOM):
                line = line[len(_BOM) :]
            line = line.lstrip()
            if continued is not None:
                name, value = continued[0], continued[1] + line
            else:
                if line.startswith(b"["):
                    section, line = _parse_section_header(line)
                    ret._values.setdefault(_section_key(section), {})
                if not _strip_comment(line).strip():
                    continue
                if section is None:
                    raise InvalidConfig(f"setting {line!r} outside of any section")
                name, sep, value = line.partition(b"=")
                name = (name if sep else _strip_comment(name)).strip()
                if not _valid_name(name):
                    raise InvalidConfig(f"invalid variable name {name!r}")
                if not sep:
                    ret.set(section, name, True)
                    continue
            if _is_continued(value):
                continued = (name, value.rstrip(b"\r\n")[:-1])
                continue
            continued = None
            assert section is not None
            ret.set(section, name, _unquote(value))
        if continued is not None:
            assert section is not None
            ret.set(section, continued[0], _unquote(continued[1]))
        return ret

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike[str]]) -> "ConfigFile":
        """Read configuration from a file on disk.

        Raises:
          FileNotFoundError: if there is no such file
          InvalidConfig: if the file is not valid git configuration
        """
        path = os.fspath(path)
        with GitFile(path, "rb") as f:
            try:
                ret = cls.from_file(f)
            except InvalidConfig as exc:
                raise InvalidConfig(f"bad config file {path}: {exc}") from exc
        ret.path = path
        return ret

    def write_to_path(self, path: Union[str, os.PathLike[str]]) -> None:
        """Write configuration to a file on disk, replacing it atomically."""
        with GitFile(path, "wb") as f:
            self.write_to_file(f)

    def write_to_file(self, f: IO[bytes]) -> None:
        """Write configuration to a file-like object."""
        for (name, *subsection), values in self._values.items():
            if subsection:
                f.write(b'[%s "%s"]\n' % (name, _escape(subsection[0])))
            else:
                f.write(b"[%s]\n" % name)
            for key, value in values.items():
                f.write(b"\t%s = %s\n" % (key, _quote(value)))


def user_config_paths() -> list[str]:
    """Return the per-user configuration files, highest priority first.

    ``$GIT_CONFIG_GLOBAL`` replaces both ``~/.gitconfig`` and
    ``$XDG_CONFIG_HOME/git/config`` when set.
    """
    global_config = os.environ.get("GIT_CONFIG_GLOBAL")
    if global_config:
        return [global_config]
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser(
        "~/.config"
    )
    return [
        os.path.expanduser("~/.gitconfig"),
        os.path.join(xdg_config_home, "git", "config"),
    ]


class StackedConfig(Config):
    """Configuration which reads from multiple config files."""

    def __init__(self, backends: Sequence[Config]) -> None:
        """Initialize a StackedConfig.

        Args:
          backends: Configurations to read from, highest priority first
        """
        self.backends = list(backends)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} for {self.backends!r}>"

    @classmethod
    def default_backends(cls) -> list[ConfigFile]:
        """Load whichever of the user's configuration files exist."""
        backends = []
        for path in user_config_paths():
            try:
                backends.append(ConfigFile.from_path(path))
            except FileNotFoundError:
                continue
        return backends

    def get(self, section: SectionLike, name: NameLike) -> bytes:
        for backend in self.backends:
            try:
                return backend.get(section, name)
            except KeyError:
                pass
        raise KeyError(name)
