"""
Pydantic models for the YAML variable definition file and for the
resolver's own settings.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolverSettings(BaseModel):
    """Settings of one ordering run."""

    model_config = ConfigDict(extra="forbid")

    # Names that are expected to be undefined at compile time (provided by the
    # installer runtime or the environment); referencing them is not warned about.
    external_variables: List[str] = Field(default_factory=list)

    # Extract references with this many threads; `None` or 1 means sequential.
    max_workers: Optional[int] = Field(default=None, ge=1)


class StaticVariableEntry(BaseModel):
    """A `<variable name=".." value=".."/>` declaration."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    value: Any = ""
    condition: Optional[str] = None

    @field_validator("name")
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError("variable name must not be blank")
        return v.strip()


class DynamicVariableEntry(BaseModel):
    """
    One candidate of a dynamic variable. Any key that is not a field of this
    model is a parameter of the selected provider.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    provider: Optional[str] = None
    value: Any = None
    condition: Optional[str] = None
    checkonce: bool = False
    ignorefailure: bool = True
    unset: bool = True

    # e.g. [{"regex": {"regexp": "...", "select": "\\1"}}, {"location": {"basedir": "${dir}"}}]
    filters: List[Dict[str, Dict[str, Any]]] = Field(default_factory=list)

    @field_validator("name")
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError("variable name must not be blank")
        return v.strip()

    @property
    def provider_params(self) -> Dict[str, Any]:
        params = dict(self.model_extra or {})
        if self.value is not None:
            params["value"] = self.value
        return params


class DefinitionFile(BaseModel):
    """Top level layout of a definition file."""

    model_config = ConfigDict(extra="forbid")

    settings: ResolverSettings = Field(default_factory=ResolverSettings)
    variables: List[Dict[str, Any]] = Field(default_factory=list)
    dynamicvariables: List[Dict[str, Any]] = Field(default_factory=list)
