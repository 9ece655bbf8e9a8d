"""Component identity values."""

from __future__ import annotations

from dataclasses import dataclass, replace

DEFAULT_NAMESPACE = "global"
VERSION_DELIMITER = "@"


@dataclass(slots=True, frozen=True)
class ComponentId:
    """Globally unique component key: scope, namespace, name and version."""

    name: str
    namespace: str = DEFAULT_NAMESPACE
    scope: str | None = None
    version: str | None = None

    def __str__(self) -> str:
        base = self.to_string_without_version()
        if self.version:
            return f"{base}{VERSION_DELIMITER}{self.version}"
        return base

    def to_string_without_version(self) -> str:
        """Return the identity string with the version part dropped."""
        parts = [self.scope] if self.scope else []
        parts.extend([self.namespace, self.name])
        return "/".join(parts)

    def without_version(self) -> ComponentId:
        """Return a copy of this identity with no version."""
        return replace(self, version=None)

    def to_full_path(self) -> str:
        """Return the POSIX sub-path used for version-qualified nested placement."""
        parts = [self.namespace, self.name]
        if self.scope:
            parts.append(self.scope)
        if self.version:
            parts.append(self.version)
        return "/".join(parts)

    def package_name(self, registry_prefix: str, exclude_registry_prefix: bool = False) -> str:
        """Return the package-manager name the component is published under."""
        segments = [self.scope] if self.scope else []
        if self.namespace != DEFAULT_NAMESPACE:
            segments.append(self.namespace)
        segments.append(self.name)
        bare = ".".join(segments)
        if exclude_registry_prefix or not registry_prefix:
            return bare
        return f"{registry_prefix.rstrip('/')}/{bare}"

    @classmethod
    def parse(cls, text: str) -> ComponentId:
        """Parse ``scope/namespace/name@version`` back into an identity."""
        stripped = text.strip()
        if not stripped:
            raise ValueError("Component id must be non-empty.")
        version: str | None = None
        if VERSION_DELIMITER in stripped:
            stripped, _, version = stripped.rpartition(VERSION_DELIMITER)
            if not version:
                raise ValueError(f"Component id '{text}' has an empty version.")
        parts = stripped.split("/")
        if any(not part for part in parts):
            raise ValueError(f"Component id '{text}' has an empty segment.")
        if len(parts) == 1:
            return cls(name=parts[0], version=version)
        if len(parts) == 2:
            return cls(name=parts[1], namespace=parts[0], version=version)
        if len(parts) == 3:
            return cls(name=parts[2], namespace=parts[1], scope=parts[0], version=version)
        raise ValueError(f"Component id '{text}' has too many segments.")
