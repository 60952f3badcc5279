# SPDX-License-Identifier: MIT
"""Pydantic models for protocol responses and the snapshot document."""

from pydantic import BaseModel, ConfigDict, Field

from .identity import ModuleIdentity


class ServiceDiscovery(BaseModel):
    """Terraform service discovery document served at /.well-known/terraform.json."""

    model_config = ConfigDict(populate_by_name=True)

    modules_v1: str = Field(alias="modules.v1", description="Base path of the module registry API")


class VersionEntry(BaseModel):
    version: str


class ModuleVersions(BaseModel):
    versions: list[VersionEntry] = Field(default_factory=list)


class VersionsResponse(BaseModel):
    """Response for the module versions endpoint.

    The protocol wraps the version list in a single-element ``modules`` array.
    """

    modules: list[ModuleVersions]

    @classmethod
    def from_versions(cls, versions: list[str]) -> "VersionsResponse":
        return cls(modules=[ModuleVersions(versions=[VersionEntry(version=v) for v in versions])])


class HealthResponse(BaseModel):
    status: str
    version: str
    modules: int = Field(ge=0, description="Number of indexed module versions")


class SnapshotRecord(BaseModel):
    """One module version as persisted in data.json."""

    model_config = ConfigDict(extra="ignore")

    namespace: str
    name: str
    system: str
    version: str

    def to_identity(self) -> ModuleIdentity:
        return ModuleIdentity(
            namespace=self.namespace,
            name=self.name,
            system=self.system,
            version=self.version,
        )

    @classmethod
    def from_identity(cls, identity: ModuleIdentity) -> "SnapshotRecord":
        return cls(**identity.to_dict())


class SnapshotDocument(BaseModel):
    """Root of data.json: ``{"modules": [...]}`` in index order."""

    modules: list[SnapshotRecord] = Field(default_factory=list)
