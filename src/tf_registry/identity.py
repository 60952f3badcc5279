# SPDX-License-Identifier: MIT
"""Module identity: the (namespace, name, system, version) coordinate.

Versions follow semantic versioning, MAJOR.MINOR.PATCH with optional
pre-release and build metadata:
- Pre-release: -alpha, -alpha.1, -beta.2, -rc.1
- Build metadata: +build, +build.123, +20240101
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass

from .errors import InvalidIdentityError

# SemVer 2.0.0 grammar
# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)"
    r"\.(?P<minor>0|[1-9]\d*)"
    r"\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

FIELDS = ("namespace", "name", "system", "version")

_RESERVED_SEGMENTS = frozenset({".", ".."})


def is_valid_semver(version: str) -> bool:
    """Check if a string is a valid semantic version.

    Examples:
        >>> is_valid_semver("1.0.0")
        True
        >>> is_valid_semver("1.0")
        False
        >>> is_valid_semver("1.0.0-alpha+build.7")
        True
    """
    if not isinstance(version, str):
        return False
    return SEMVER_PATTERN.fullmatch(version) is not None


@dataclass(frozen=True, slots=True)
class ModuleIdentity:
    """Identifies one version of a module.

    The identity is an opaque coordinate: nothing in the registry inspects
    its fields beyond ``validate``. Each field becomes one directory level
    of the storage layout, so all four must be safe single path segments.

    Attributes:
        namespace: Grouping identifier, usually an organization or team
        name: Module name
        system: Target platform or provider (e.g. "aws")
        version: Semantic version string
    """

    namespace: str
    name: str
    system: str
    version: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}/{self.system}/{self.version}"

    def validate(self) -> "ModuleIdentity":
        """Check every field, returning self so calls can be chained.

        Raises:
            InvalidIdentityError: If a field is empty, is not a single path
                segment, or the version is not a semantic version
        """
        for field_name in FIELDS:
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidIdentityError(f"Module {field_name} must not be empty", field=field_name)
            if value in _RESERVED_SEGMENTS or "/" in value or "\\" in value or "\x00" in value:
                raise InvalidIdentityError(
                    f"Module {field_name} '{value}' is not a valid path segment", field=field_name
                )

        if not is_valid_semver(self.version):
            raise InvalidIdentityError(
                f"Version '{self.version}' does not follow semantic versioning format",
                field="version",
            )
        return self

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidIdentityError:
            return False
        return True

    def matches(self, namespace: str, name: str, system: str) -> bool:
        """Return True if the first three coordinates are equal."""
        return self.namespace == namespace and self.name == name and self.system == system

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
