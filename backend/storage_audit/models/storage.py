from pydantic import BaseModel, Field, model_validator
from typing import Optional, List


class ContainerSize(BaseModel):
    name: str
    size: int = Field(ge=0)


class ContainerResult(BaseModel):
    """Outcome of sizing one container: a byte count or the reason it failed"""
    name: str
    size: Optional[int] = Field(default=None, ge=0)
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_outcome(self):
        # Exactly one of size and error
        if (self.size is None) == (self.error is None):
            raise ValueError(f"Container {self.name} needs either a size or an error")
        return self

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.size is not None

    def to_container_size(self) -> ContainerSize:
        if not self.succeeded:
            raise ValueError(f"Container {self.name} has no size: {self.error}")
        return ContainerSize(name=self.name, size=self.size)


class AccountReport(BaseModel):
    account: str
    results: List[ContainerResult] = []
    error: Optional[str] = None

    @property
    def containers(self) -> List[ContainerSize]:
        """Successfully sized containers, in listing order"""
        return [r.to_container_size() for r in self.results if r.succeeded]

    @property
    def failed(self) -> List[ContainerResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def total_size(self) -> int:
        # Failed containers contribute nothing
        return sum(c.size for c in self.containers)

    @property
    def complete(self) -> bool:
        return self.error is None and not self.failed


class Subscription(BaseModel):
    subscription_id: str
    display_name: str
    state: Optional[str] = None
