"""
Image information (info.json) models.
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field


class ProfileDescription(BaseModel):
    """Profile entry listing the formats available for one identifier"""

    formats: List[str] = Field(default_factory=list)


class InfoDocument(BaseModel):
    """IIIF Image Information response"""

    model_config = ConfigDict(populate_by_name=True)

    context: str = Field(..., alias="@context")
    id: str = Field(..., alias="@id")
    protocol: str
    width: int
    height: int
    profile: List[Union[str, ProfileDescription]]

    @property
    def formats(self) -> List[str]:
        for entry in self.profile:
            if isinstance(entry, ProfileDescription):
                return entry.formats
        return []

    def to_json(self) -> Dict[str, Any]:
        """Serialize with the JSON-LD keys (@context, @id)"""
        return self.model_dump(by_alias=True)
