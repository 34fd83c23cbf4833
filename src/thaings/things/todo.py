"""Presentation of a captured message as a Things to-do."""

from __future__ import annotations

from dataclasses import dataclass, replace

from thaings.queue.models import Message

TAG_WORKING = "Working"
TAG_READY = "Ready"
WORKFLOW_TAGS = (TAG_WORKING, TAG_READY)

RESPONSE_SEPARATOR = "---"
RESPONSE_TERMINATOR = "***"


@dataclass(frozen=True, slots=True)
class ToDo:
    """Desired state of a to-do: content plus the current workflow tag.

    Transitions return new instances.
    """

    title: str | None
    notes: str
    tags: tuple[str, ...]
    checklist: str | None = None
    workflow_tag: str | None = None

    @classmethod
    def from_message(cls, message: Message) -> ToDo:
        return cls(
            title=message.title,
            notes=message.notes,
            tags=message.tags,
            checklist=message.checklist,
        )

    def marked_working(self) -> ToDo:
        return replace(self, workflow_tag=TAG_WORKING)

    def marked_ready(self) -> ToDo:
        return replace(self, workflow_tag=TAG_READY)

    def final_tags(self) -> list[str]:
        """User tags with workflow tags replaced by the current one."""

        tags = [tag for tag in self.tags if tag not in WORKFLOW_TAGS]
        if self.workflow_tag is not None:
            tags.append(self.workflow_tag)
        return tags

    def prompt(self) -> str:
        parts: list[str] = []
        if self.title:
            parts.append(self.title)
        if self.notes:
            parts.append(self.notes)
        if isinstance(self.checklist, str) and self.checklist:
            parts.append(f"Checklist:\n{self.checklist}")
        return "\n\n".join(parts)


def response_note(text: str) -> str:
    """Wrap agent output so it reads as a separate block in the notes."""

    return f"\n\n{RESPONSE_SEPARATOR}\n\n{text.strip()}\n\n{RESPONSE_TERMINATOR}\n\n"
