from __future__ import annotations

from .models import (
    DEBUG_CONTAINER_COMMAND,
    DEBUG_CONTAINER_NAME,
    PULL_ALWAYS,
    TERMINATION_MESSAGE_FALLBACK_TO_LOGS_ON_ERROR,
    DebugContainerSpec,
)


def build_debug_container(image: str) -> DebugContainerSpec:
    """Idle debug container running `image`.

    The image is passed through untouched; a bad reference shows up later
    as a pull failure on the pod.
    """

    return DebugContainerSpec(
        name=DEBUG_CONTAINER_NAME,
        image=image,
        command=DEBUG_CONTAINER_COMMAND,
        image_pull_policy=PULL_ALWAYS,
        termination_message_policy=TERMINATION_MESSAGE_FALLBACK_TO_LOGS_ON_ERROR,
    )
