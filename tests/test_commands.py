"""Tests for prometheus_term/commands.py and prometheus_term/dispatcher.py.

Covers:
- Case-insensitive registration, lookup and completion
- Dispatching to sync and async handlers with parsed arguments
- Handler failures reported as one line
- Unknown commands forwarded to the fallback
- Prompt written after each line, or deferred while focus is captured
"""

from __future__ import annotations

from prometheus_term.commands import CommandContext, CommandRegistry
from prometheus_term.dispatcher import PROMPT, Dispatcher
from prometheus_term.focus import ArbitratedIO, FocusArbiter


def _noop(ctx: CommandContext) -> None:
    return None


class TestCommandRegistry:
    """Tests for CommandRegistry."""

    def test_lookup_is_case_insensitive(self) -> None:
        """Names are stored lowercased and found in any case."""
        registry = CommandRegistry()
        registry.register("Help", _noop)
        assert registry.has("HELP")
        assert registry.get("help") is not None
        assert registry.names() == ["help"]

    def test_register_replaces(self) -> None:
        """Registering an existing name overwrites the handler."""
        registry = CommandRegistry()
        registry.register("x", _noop, "first")
        registry.register("X", _noop, "second")
        assert len(registry) == 1
        assert registry.get("x").summary == "second"

    def test_unregister(self) -> None:
        """Unregistering removes the command; unknown names are ignored."""
        registry = CommandRegistry()
        registry.register("x", _noop)
        registry.unregister("X")
        registry.unregister("missing")
        assert not registry.has("x")

    def test_completions_sorted(self) -> None:
        """Completions are the sorted names starting with the prefix."""
        registry = CommandRegistry()
        for name in ("history", "help", "hello", "clear"):
            registry.register(name, _noop)
        assert registry.completions("HE") == ["hello", "help"]
        assert registry.completions("") == ["clear", "hello", "help", "history"]
        assert registry.completions("z") == []


class TestDispatcher:
    """Tests for Dispatcher.dispatch()."""

    def _make(self, io: ArbitratedIO, arbiter: FocusArbiter) -> tuple[Dispatcher, CommandRegistry, list[str]]:
        registry = CommandRegistry()
        asked: list[str] = []

        async def fallback(line: str) -> None:
            asked.append(line)

        return Dispatcher(registry, io, arbiter, fallback), registry, asked

    async def test_runs_sync_handler_with_args(self, io, arbiter, screen) -> None:
        """Handlers get the trimmed line and the arguments after the name."""
        dispatcher, registry, _ = self._make(io, arbiter)
        seen: list[CommandContext] = []
        registry.register("echo", seen.append)

        await dispatcher.dispatch('  ECHO one "two three"  ')

        assert seen[0].raw_command == 'ECHO one "two three"'
        assert seen[0].args == ["one", "two three"]
        assert screen.output == PROMPT

    async def test_awaits_async_handler(self, io, arbiter, screen) -> None:
        """A coroutine handler finishes before the prompt is written."""
        dispatcher, registry, _ = self._make(io, arbiter)

        async def slow(ctx: CommandContext) -> None:
            ctx.io.writeln("done")

        registry.register("slow", slow)
        await dispatcher.dispatch("slow")
        assert screen.output == "done\n" + PROMPT
        assert not dispatcher.running

    async def test_handler_failure_is_one_line(self, io, arbiter, screen) -> None:
        """An exception becomes 'Error: ...' and the prompt comes back."""
        dispatcher, registry, _ = self._make(io, arbiter)

        def boom(ctx: CommandContext) -> None:
            raise RuntimeError("kaput")

        registry.register("boom", boom)
        await dispatcher.dispatch("boom")
        assert screen.output == "Error: kaput\n" + PROMPT

    async def test_unknown_command_goes_to_fallback(self, io, arbiter) -> None:
        """Lines that do not name a command are forwarded whole."""
        dispatcher, _, asked = self._make(io, arbiter)
        await dispatcher.dispatch("  who are you?  ")
        assert asked == ["who are you?"]

    async def test_blank_line_only_prompts(self, io, arbiter, screen) -> None:
        """A blank line runs nothing."""
        dispatcher, _, asked = self._make(io, arbiter)
        await dispatcher.dispatch("   ")
        assert asked == []
        assert screen.output == PROMPT

    async def test_prompt_deferred_while_captured(self, io, arbiter, screen) -> None:
        """A handler that leaves focus captured gets the prompt on release."""
        dispatcher, registry, _ = self._make(io, arbiter)
        registry.register("grab", lambda ctx: ctx.io.capture(lambda event: None))

        await dispatcher.dispatch("grab")
        assert screen.output == ""

        arbiter.release()
        assert screen.output == PROMPT
