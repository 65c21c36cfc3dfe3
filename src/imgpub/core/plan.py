"""Functions and data structures to represent the actions needed to publish an
image and track their progress."""
import enum
from typing import List, Optional

from attrs import define

from imgpub.core.reference import ImageReference
from imgpub.core.request import PublishRequest


@enum.unique
class ActionState(enum.Enum):
    """Represents the state of an action during the publishing.

    Attributes:

    * `PLANNED`: the action will be executed once the previous ones are done.
    * `IN_PROGRESS`: the execution has started.
    * `DONE`: the execution completed successfully.
    * `FAILED`: the execution failed.
    * `CANCELLED`: a previous action failed and this one won't be executed.
    """

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    FAILED = "FAILED"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


@enum.unique
class ActionType(enum.Enum):
    """Describes what type of operation will be performed by an action.

    Attributes:

    * `LOAD`: loads the image artifact into the runtime.
    * `TAG`: creates a destination reference.
    * `PUSH`: pushes all the tags of the base repository.
    """

    LOAD = "LOAD"
    TAG = "TAG"
    PUSH = "PUSH"


@define(frozen=True, kw_only=True)
class Action:
    """Represents an action in a publishing plan.

    Arguments:
        type: the operation to perform.
        target: what the operation acts on (artifact path, destination
            reference or repository).
        reference: the destination reference of a `TAG` action.
        state: the current state of the action execution.
        error: the error message of a failed action, if available.
    """

    type: ActionType
    target: str
    reference: Optional[ImageReference] = None
    state: ActionState = ActionState.PLANNED
    error: Optional[str] = None


@define(frozen=True, kw_only=True)
class Plan:
    """Describes all the actions to perform in order to publish an image."""

    actions: List[Action]

    def with_state(self, state: ActionState) -> List[Action]:
        """Returns all the actions in the given state."""
        return [action for action in self.actions if action.state is state]


def generate_plan(request: PublishRequest) -> Plan:
    """Generates the plan to publish an image.

    The artifact is loaded first, then every destination is tagged in the
    requested order and, finally, the base repository is pushed once.

    Arguments:
        request: the validated publish request.

    Returns:
        The plan with all the actions in the `PLANNED` state.
    """
    actions = [Action(type=ActionType.LOAD, target=str(request.artifact))]

    for dest in request.destinations:
        actions.append(Action(type=ActionType.TAG, target=str(dest), reference=dest))

    actions.append(Action(type=ActionType.PUSH, target=request.base.repository))

    return Plan(actions=actions)
