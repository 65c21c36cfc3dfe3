"""Container runtime backed by a Docker daemon."""
import contextlib
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import docker
import requests

from imgpub.core.errors import ArtifactError, PushError, RuntimeUnavailable, TagError
from imgpub.core.reference import ImageReference
from imgpub.core.runtime import ContainerRuntime
from imgpub.utils import log


@contextlib.contextmanager
def _daemon_errors():
    try:
        yield

    except docker.errors.APIError:
        raise

    except requests.exceptions.RequestException as exc:
        raise RuntimeUnavailable(f"cannot reach the docker daemon: {exc}") from exc


class DockerRuntime(ContainerRuntime):
    """Publishes images through the Docker Engine API.

    Arguments:
        client: the docker client to use.
        auth_config: registry credentials used when pushing. If not set, the
            credentials stored in the docker configuration are used.
    """

    def __init__(
        self, client: docker.DockerClient, auth_config: Optional[Dict[str, str]] = None
    ) -> None:
        self.client = client
        self.auth_config = auth_config

    @classmethod
    def from_env(cls, auth_config: Optional[Dict[str, str]] = None) -> "DockerRuntime":
        """Creates a runtime connected to the daemon configured in the
        environment (i.e. `DOCKER_HOST`).

        Raises:
            RuntimeUnavailable: if the daemon cannot be reached.
        """
        try:
            client = docker.from_env()

        except docker.errors.DockerException as exc:
            raise RuntimeUnavailable(f"cannot connect to the docker daemon: {exc}") from exc

        return cls(client, auth_config=auth_config)

    def load(self, artifact: Path):
        try:
            with _daemon_errors(), open(artifact, "rb") as data:
                images = self.client.images.load(data)

        except docker.errors.DockerException as exc:
            raise ArtifactError(f"cannot load artifact {artifact}: {exc}") from exc

        except OSError as exc:
            raise ArtifactError(f"cannot read artifact {artifact}: {exc}") from exc

        for image in images:
            log(f"loaded image {image.short_id} tags={','.join(image.tags)}")

    def exists(self, reference: ImageReference) -> bool:
        try:
            with _daemon_errors():
                self.client.images.get(str(reference))

        except docker.errors.ImageNotFound:
            return False

        except docker.errors.APIError as exc:
            raise RuntimeUnavailable(f"cannot inspect {reference}: {exc}") from exc

        return True

    def tag(self, source: ImageReference, destination: ImageReference):
        try:
            with _daemon_errors():
                tagged = self.client.api.tag(
                    str(source), destination.repository, destination.tag, force=True
                )

        except docker.errors.APIError as exc:
            raise TagError(destination, f"cannot tag {source} as {destination}: {exc}") from exc

        if not tagged:
            raise TagError(destination, f"cannot tag {source} as {destination}")

    def push_all_tags(self, repository: str):
        try:
            with _daemon_errors():
                output = self.client.images.push(
                    repository,
                    auth_config=self.auth_config,
                    stream=True,
                    decode=True,
                )
                _check_push_result(repository, output)

        except docker.errors.APIError as exc:
            raise PushError(repository, f"cannot push {repository}: {exc}") from exc


def _check_push_result(repository: str, output: Iterable[Dict[str, Any]]):
    for data in output:
        if "error" in data:
            raise PushError(repository, f"cannot push {repository}: {data['error']}")

        if "status" in data and "id" not in data:
            log(data["status"])
