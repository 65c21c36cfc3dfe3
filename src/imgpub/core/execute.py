"""Rules for executing a publishing plan."""
from typing import Iterable

from attrs import evolve

from imgpub.core.errors import ArtifactError, PublishError
from imgpub.core.plan import Action, ActionState, ActionType, Plan
from imgpub.core.request import PublishRequest
from imgpub.core.runtime import ContainerRuntime
from imgpub.utils import error, print_waiting, success


def _perform(runtime: ContainerRuntime, request: PublishRequest, action: Action):
    match action.type:
        case ActionType.LOAD:
            with print_waiting(f"loading {action.target}"):
                runtime.load(request.artifact)

            if not runtime.exists(request.base):
                raise ArtifactError(f"artifact {action.target} does not provide {request.base}")

            success(f"loaded {request.base} from {action.target}")

        case ActionType.TAG:
            runtime.tag(request.base, action.reference)
            success(f"tagged {request.base} as {action.reference}")

        case ActionType.PUSH:
            with print_waiting(f"pushing all tags of {action.target}"):
                runtime.push_all_tags(action.target)

            success(f"pushed all tags of {action.target}")

        case _:
            raise ValueError(f"unexpected action type {action.type}")


def _replace(plan: Plan, idx: int, action: Action) -> Plan:
    actions = list(plan.actions)
    actions[idx] = action

    return evolve(plan, actions=actions)


def execute_plan(runtime: ContainerRuntime, request: PublishRequest, plan: Plan) -> Iterable[Plan]:
    """Executes a plan performing each action sequentially and yielding a new
    version of the plan for each state change.

    The first failing action is marked as `FAILED`, all the following ones
    are `CANCELLED` and, after yielding that last plan, the error is raised
    again. Actions already completed are not undone.

    Arguments:
        runtime: the container runtime used to perform the actions.
        request: the request the plan was generated for.
        plan: the plan to execute.

    Yields:
        A new state of the plan after each action state change.

    Raises:
        PublishError: if any of the actions fails.
    """
    for idx, action in enumerate(plan.actions):
        if action.state is not ActionState.PLANNED:
            continue

        action = evolve(action, state=ActionState.IN_PROGRESS)
        plan = _replace(plan, idx, action)

        yield plan

        try:
            _perform(runtime, request, action)

        except PublishError as exc:
            error(f"{action.type.name.lower()} failed target={action.target}: {exc}")

            actions = list(plan.actions)
            actions[idx] = evolve(action, state=ActionState.FAILED, error=str(exc))
            for following in range(idx + 1, len(actions)):
                actions[following] = evolve(actions[following], state=ActionState.CANCELLED)

            yield evolve(plan, actions=actions)

            raise

        plan = _replace(plan, idx, evolve(action, state=ActionState.DONE))

        yield plan
