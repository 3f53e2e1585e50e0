"""Tests for the built-in help command."""

import pytest

from commandwire.commands.base import Command
from commandwire.commands.help import HelpCommand
from commandwire.config import HandlerConfig
from commandwire.dispatcher import DispatchResult, Dispatcher
from tests.platform_fakes import DM_CHANNEL_ID, TEXT_CHANNEL_ID, FakeSession, make_message


class BanCommand(Command):
    invokes = ("ban", "b")
    description = "Ban a member."
    help = "ban <member> [days]"
    group = "moderation"

    async def execute(self, ctx):
        pass


def _make_dispatcher(**overrides):
    dispatcher = Dispatcher(HandlerConfig(use_default_help_command=True, **overrides))
    dispatcher.register_command(BanCommand())
    return dispatcher


class TestHelpCommand:
    """Tests for HelpCommand."""

    def test_registered_when_enabled(self):
        dispatcher = _make_dispatcher()
        assert isinstance(dispatcher.get_command("help"), HelpCommand)
        assert dispatcher.get_command("?") is dispatcher.get_command("h")

    def test_not_registered_by_default(self):
        assert Dispatcher(HandlerConfig()).get_command("help") is None

    @pytest.mark.asyncio
    async def test_overview_lists_groups(self):
        dispatcher = _make_dispatcher()
        session = FakeSession()

        result = await dispatcher.handle_message(session, make_message("!help"))

        assert result is DispatchResult.COMPLETED
        channel_id, text = session.sent[0]
        assert channel_id == TEXT_CHANNEL_ID
        assert "[moderation]" in text
        assert "!ban - Ban a member." in text
        assert "[general]" in text
        assert text.index("[general]") < text.index("[moderation]")

    @pytest.mark.asyncio
    async def test_details_for_alias(self):
        dispatcher = _make_dispatcher()
        session = FakeSession()

        await dispatcher.handle_message(session, make_message("!help b"))

        text = session.sent[0][1]
        assert text.startswith("!ban")
        assert "Aliases: b" in text
        assert "ban <member> [days]" in text
        assert "DM: no" in text

    @pytest.mark.asyncio
    async def test_unknown_command(self):
        dispatcher = _make_dispatcher()
        session = FakeSession()

        await dispatcher.handle_message(session, make_message("!help nope"))

        assert session.sent == [(TEXT_CHANNEL_ID, "Unknown command: nope")]

    @pytest.mark.asyncio
    async def test_space_after_prefix_rendering(self):
        dispatcher = _make_dispatcher(space_after_prefix=True)
        session = FakeSession()

        await dispatcher.handle_message(session, make_message("! help"))

        assert "! ban - Ban a member." in session.sent[0][1]

    @pytest.mark.asyncio
    async def test_works_in_dm(self):
        dispatcher = _make_dispatcher(allow_dm=True)
        session = FakeSession()

        result = await dispatcher.handle_message(session, make_message("!help", channel_id=DM_CHANNEL_ID))

        assert result is DispatchResult.COMPLETED
        assert session.sent[0][0] == DM_CHANNEL_ID
