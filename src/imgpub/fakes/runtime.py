"""In-memory container runtime used by tests."""
from pathlib import Path
from typing import Dict, List, Set, Tuple

from attrs import define, field

from imgpub.core.errors import ArtifactError, PushError, RuntimeUnavailable, TagError
from imgpub.core.reference import ImageReference
from imgpub.core.runtime import ContainerRuntime


@define(kw_only=True)
class FakeRuntime(ContainerRuntime):
    """Simulates a local image store and a remote registry.

    Arguments:
        artifacts: image id and references provided by each artifact path.
        images: local store mapping each reference to its image id.
        registry: remote tags mapping each reference to its image id.
        calls: every operation performed, in order.
        fail_tags: destinations whose tagging fails.
        fail_push: makes every push fail.
        available: makes every operation fail when set to `False`.
    """

    artifacts: Dict[str, Tuple[str, List[ImageReference]]] = field(factory=dict)
    images: Dict[ImageReference, str] = field(factory=dict)
    registry: Dict[ImageReference, str] = field(factory=dict)
    calls: List[Tuple[str, ...]] = field(factory=list)
    fail_tags: Set[ImageReference] = field(factory=set)
    fail_push: bool = False
    available: bool = True

    def add_artifact(self, path: Path, image_id: str, *refs: ImageReference):
        """Registers the content of an artifact that can be loaded."""
        self.artifacts[str(path)] = (image_id, list(refs))

    def _check_available(self):
        if not self.available:
            raise RuntimeUnavailable("fake runtime is not available")

    def load(self, artifact: Path):
        self.calls.append(("load", str(artifact)))
        self._check_available()

        if str(artifact) not in self.artifacts:
            raise ArtifactError(f"cannot read artifact {artifact}")

        image_id, refs = self.artifacts[str(artifact)]
        for ref in refs:
            self.images[ref] = image_id

    def exists(self, reference: ImageReference) -> bool:
        self._check_available()

        return reference in self.images

    def tag(self, source: ImageReference, destination: ImageReference):
        self.calls.append(("tag", str(source), str(destination)))
        self._check_available()

        if destination in self.fail_tags or source not in self.images:
            raise TagError(destination, f"cannot tag {source} as {destination}")

        self.images[destination] = self.images[source]

    def push_all_tags(self, repository: str):
        self.calls.append(("push", repository))
        self._check_available()

        if self.fail_push:
            raise PushError(repository, f"cannot push {repository}")

        for ref, image_id in self.images.items():
            if ref.repository == repository:
                self.registry[ref] = image_id
