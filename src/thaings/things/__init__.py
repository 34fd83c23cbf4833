"""Things 3 adapters: inbound payloads, to-do view, URL scheme client."""

from thaings.things.client import ThingsClient, ThingsUrlClient, build_update_url
from thaings.things.input import TO_DO_TYPE, ThingsInput
from thaings.things.todo import TAG_READY, TAG_WORKING, ToDo

__all__ = [
    "TAG_READY",
    "TAG_WORKING",
    "TO_DO_TYPE",
    "ThingsClient",
    "ThingsInput",
    "ThingsUrlClient",
    "ToDo",
    "build_update_url",
]
