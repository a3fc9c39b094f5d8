"""Terminal client input handling."""

from __future__ import annotations

import asyncio

import pytest

import console


def test_typed_command_is_returned(monkeypatch: pytest.MonkeyPatch):
    async def typed(prompt):
        return "S"

    monkeypatch.setattr(console, "ask", typed)

    async def scenario():
        return await console.read_command("> ", asyncio.Event())

    assert asyncio.run(scenario()) == ("s", None)


def test_completion_interrupts_a_waiting_prompt(monkeypatch: pytest.MonkeyPatch):
    async def scenario():
        never_answered = asyncio.Event()

        async def waiting(prompt):
            await never_answered.wait()
            return ""

        monkeypatch.setattr(console, "ask", waiting)
        navigator = console.ConsoleNavigator()
        reading = asyncio.ensure_future(console.read_command("> ", navigator.requested))
        await asyncio.sleep(0)

        navigator.navigate("/profile", delay=2.0)
        command, pending = await asyncio.wait_for(reading, timeout=1.0)

        assert command is None
        assert pending is not None and not pending.done()
        assert not navigator.arrived.is_set()
        pending.cancel()

    asyncio.run(scenario())
