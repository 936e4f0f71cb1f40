import asyncio
import socket
from datetime import datetime

import pytest

from cipherchat.client import (
    enrich_with_emojis,
    format_incoming,
    log_to_file,
    run_client,
    run_client_once,
    timestamp,
)
from cipherchat.crypto import DecryptionError, encode_line
from cipherchat.server import ChatServer

MOMENT = datetime(2024, 1, 2, 3, 4, 5)


def _fake_input(monkeypatch, answers):
    remaining = iter(answers)

    def fake(*_args):
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake)


def _free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_enrich_replaces_each_smiley():
    assert enrich_with_emojis(":)") == "😊"
    assert enrich_with_emojis(":(") == "😢"
    assert enrich_with_emojis(":D") == "😄"
    assert enrich_with_emojis("<3") == "❤️"
    assert enrich_with_emojis(":o") == "😲"
    assert enrich_with_emojis(":thumbsup:") == "👍"


def test_enrich_leaves_plain_text():
    assert enrich_with_emojis("hello there") == "hello there"


def test_timestamp_format():
    assert timestamp(MOMENT) == "[2024-01-02 03:04:05]"


def test_timestamp_default_is_bracketed():
    stamp = timestamp()
    assert stamp.startswith("[") and stamp.endswith("]")
    assert len(stamp) == len(timestamp(MOMENT))


def test_format_incoming_decrypts_and_enriches():
    line = encode_line("hi :)")
    assert format_incoming(line, MOMENT) == f"{timestamp(MOMENT)} hi 😊"


def test_format_incoming_plain_fallback():
    assert format_incoming("Username: ", MOMENT) == f"{timestamp(MOMENT)} Username: "


def test_format_incoming_bad_ciphertext_raises():
    with pytest.raises(DecryptionError):
        format_incoming("AAAAAAAAAAAAAAAAAAAAAAAA", MOMENT)


def test_log_to_file_disabled(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CLIENT_CHAT_LOGGING", raising=False)
    result = log_to_file("alice", "hello")
    written = sorted(path.name for path in tmp_path.iterdir())
    assert (result, written) == (None, [])


def test_log_to_file_appends(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CLIENT_CHAT_LOGGING", "TRUE")
    results = [log_to_file("alice", "first"), log_to_file("alice", "second")]
    content = (tmp_path / "alice_chat_log.txt").read_text(encoding="utf-8")
    assert results == [None, None]
    assert content.splitlines() == ["first", "second"]


@pytest.mark.asyncio
async def test_failed_connection_returns_false(capsys):
    result = await run_client_once("127.0.0.1", _free_port())
    assert result is False
    assert "Failed to connect" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_server_closing_ends_session(capsys):
    async def closer(_reader, writer):
        writer.close()

    srv = await asyncio.start_server(closer, "127.0.0.1", 0)
    port = srv.sockets[0].getsockname()[1]
    try:
        result = await run_client_once("127.0.0.1", port)
    finally:
        srv.close()
        await srv.wait_closed()
    assert result is False
    assert "Connection closed by server." in capsys.readouterr().out


@pytest.mark.asyncio
async def test_full_session_against_server(monkeypatch, capsys):
    monkeypatch.delenv("CLIENT_CHAT_LOGGING", raising=False)
    monkeypatch.delenv("DEBUG_ENCRYPTED", raising=False)
    chat = ChatServer()
    srv = await asyncio.start_server(chat.handle_client, "127.0.0.1", 0)
    port = srv.sockets[0].getsockname()[1]
    _fake_input(monkeypatch, ["alice", "y", "password", "list", "quit", "n"])
    try:
        result = await run_client_once("127.0.0.1", port)
    finally:
        srv.close()
        await srv.wait_closed()
    out = capsys.readouterr().out
    assert result is False
    assert "Welcome, alice!" in out
    assert "Online users: " in out
    assert "Goodbye!" in out
    assert "Do you want to login again?" in out


@pytest.mark.asyncio
async def test_run_client_reconnects(monkeypatch, capsys):
    monkeypatch.delenv("CLIENT_CHAT_LOGGING", raising=False)
    monkeypatch.delenv("DEBUG_ENCRYPTED", raising=False)
    chat = ChatServer()
    srv = await asyncio.start_server(chat.handle_client, "127.0.0.1", 0)
    port = srv.sockets[0].getsockname()[1]
    _fake_input(
        monkeypatch,
        ["bob", "y", "password", "quit", "maybe", "y",
         "bob", "n", "password", "quit", "no"],
    )
    try:
        await run_client("127.0.0.1", port)
    finally:
        srv.close()
        await srv.wait_closed()
    out = capsys.readouterr().out
    assert "Reconnecting to chat..." in out
    assert "Please enter 'y' or 'n'." in out
    assert out.count("Welcome, bob!") == 2
    assert out.rstrip().endswith("Exiting chat. Goodbye!")