# SPDX-License-Identifier: Apache-2.0
"""Wiring between conversations, the AI client and the journey view.

:class:`JourneySession` runs the commands returned by state-machine
transitions, cancels pending timers when the journey is replaced, and sends
late AI replies to the conversation that asked for them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from guidesphere.conversations import (
    ChatAttachment,
    ChatMessage,
    ConversationLibrary,
    ConversationNotFoundError,
    ConversationRecord,
)
from guidesphere.journey.models import JourneyStep, Position
from guidesphere.journey.parser import StepParser
from guidesphere.journey.rotation import RotationEngine
from guidesphere.journey.state import (
    ClearTypewriter,
    JourneyStateMachine,
    RetargetRotation,
    StartTypewriter,
    Transition,
)
from guidesphere.journey.typewriter import Typewriter
from guidesphere.llm import LLMClient, build_system_prompt
from guidesphere.render.base import DrawingSurface
from guidesphere.render.loop import RenderLoop
from guidesphere.scheduler import Scheduler

LOGGER = logging.getLogger(__name__)

CONNECTION_ISSUE_TITLE = "Connection Issue"
CONNECTION_ISSUE_TEXT = (
    "I couldn't reach the guide just now. Check your connection and try again."
)


def connection_issue_steps() -> list[JourneyStep]:
    return [
        JourneyStep(
            id="step-1",
            title=CONNECTION_ISSUE_TITLE,
            content=CONNECTION_ISSUE_TEXT,
            position=Position(lat=20.0, lng=0.0),
        )
    ]


class JourneySession:
    def __init__(
        self,
        library: ConversationLibrary,
        client: LLMClient,
        scheduler: Scheduler,
        *,
        surface: DrawingSurface | None = None,
        parser: StepParser | None = None,
        system_prompt: str | None = None,
        goal: str | None = None,
        profile: str | None = None,
    ) -> None:
        self.library = library
        self.client = client
        self.scheduler = scheduler
        self.parser = parser if parser is not None else StepParser()
        if system_prompt is None:
            system_prompt = build_system_prompt(goal, profile)
        self.system_prompt = system_prompt
        self.machine = JourneyStateMachine()
        self.rotation = RotationEngine()
        self.typewriter = Typewriter(scheduler)
        self.render_loop: RenderLoop | None = None
        if surface is not None:
            self.render_loop = RenderLoop(
                surface, scheduler, self.machine, self.rotation
            )

    # -- view lifecycle ----------------------------------------------------

    def open(self) -> None:
        """Show the selected conversation and start drawing."""

        convo = self.library.active
        self._show(convo)
        if self.render_loop is not None:
            self.render_loop.start()

    def teardown(self) -> None:
        if self.render_loop is not None:
            self.render_loop.teardown()
        self.typewriter.cancel()

    # -- conversations -----------------------------------------------------

    def new_conversation(self, name: str | None = None) -> ConversationRecord:
        convo = self.library.create(name)
        self._show(convo)
        return convo

    def select_conversation(self, conversation_id: str) -> ConversationRecord:
        convo = self.library.select(conversation_id)
        self._show(convo)
        return convo

    def delete_conversation(self, conversation_id: str) -> None:
        was_active = self.library.active_id == conversation_id
        self.library.delete(conversation_id)
        if was_active:
            self._show(self.library.active)

    def _show(self, convo: ConversationRecord | None) -> None:
        self.typewriter.cancel()
        steps = convo.steps() if convo is not None else []
        self.execute(self.machine.load(steps))

    # -- navigation --------------------------------------------------------

    def next(self) -> Transition:
        return self.execute(self.machine.next())

    def prev(self) -> Transition:
        return self.execute(self.machine.prev())

    def navigate_to(self, index: int) -> Transition:
        return self.execute(self.machine.navigate_to(index))

    def complete(self) -> Transition:
        return self.execute(self.machine.complete())

    def execute(self, transition: Transition) -> Transition:
        for command in transition.commands:
            if isinstance(command, RetargetRotation):
                self.rotation.retarget(command.angle)
            elif isinstance(command, StartTypewriter):
                self.typewriter.reveal(command.text)
            elif isinstance(command, ClearTypewriter):
                self.typewriter.reveal(None)
        return transition

    # -- AI replies --------------------------------------------------------

    async def ask(
        self,
        text: str,
        conversation_id: str | None = None,
        *,
        attachment: ChatAttachment | None = None,
    ) -> list[JourneyStep]:
        """Send ``text`` to the guide and turn the reply into a journey.

        The reply is stored on the conversation that was selected when the
        question was asked, even if the user has switched away since. An
        ``attachment`` is kept on the user message and sent along with it.
        """

        if conversation_id is None:
            active = self.library.active or self.new_conversation()
            conversation_id = active.id
        convo = self.library.get(conversation_id)
        history = [(m.role, m.text) for m in convo.messages]
        question = ChatMessage(role="user", text=text, attachment=attachment)
        self.library.append_messages(conversation_id, [question])
        try:
            reply = await asyncio.to_thread(
                self.client.generate,
                self.system_prompt,
                text,
                history,
                attachment=attachment,
            )
        except Exception:
            LOGGER.warning(
                "guide request failed for conversation %s",
                conversation_id,
                exc_info=True,
            )
            return self.deliver_steps(conversation_id, connection_issue_steps())
        return self.deliver_response(conversation_id, reply)

    def deliver_response(
        self, conversation_id: str, raw: str | None
    ) -> list[JourneyStep]:
        steps = self.parser.parse(raw)
        try:
            self.library.append_messages(
                conversation_id, [ChatMessage(role="model", text=raw or "")]
            )
        except ConversationNotFoundError:
            LOGGER.info("conversation %s was deleted; reply dropped", conversation_id)
            return steps
        return self.deliver_steps(conversation_id, steps)

    def deliver_steps(
        self, conversation_id: str, steps: Sequence[JourneyStep]
    ) -> list[JourneyStep]:
        steps = list(steps)
        try:
            self.library.replace_steps(conversation_id, steps)
        except ConversationNotFoundError:
            LOGGER.info("conversation %s was deleted; steps dropped", conversation_id)
            return steps
        if self.library.active_id == conversation_id:
            self.typewriter.cancel()
            self.execute(self.machine.load(steps))
        else:
            LOGGER.debug(
                "stored %d steps for background conversation %s",
                len(steps),
                conversation_id,
            )
        return steps
