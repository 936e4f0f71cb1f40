"""Interactive chat client: plaintext login, then encrypted chat with the server."""

from __future__ import annotations

import asyncio
import base64
import binascii
import os
import sys
from datetime import datetime

from cipherchat.crypto import DecryptionError, decrypt_message, encode_line

_EMOJIS = (
    (":)", "😊"),
    (":(", "😢"),
    (":D", "😄"),
    ("<3", "❤️"),
    (":o", "😲"),
    (":thumbsup:", "👍"),
)

_BLUE = "\x1b[34m"
_GREEN = "\x1b[32m"
_RESET = "\x1b[0m"

_PROMPT = "=> "


def enrich_with_emojis(text: str) -> str:
    """Replace the supported text smileys with emoji."""
    for smiley, emoji in _EMOJIS:
        text = text.replace(smiley, emoji)
    return text


def timestamp(now: datetime | None = None) -> str:
    """Format *now* (default: the current local time) as ``[YYYY-mm-dd HH:MM:SS]``."""
    moment = now if now is not None else datetime.now()
    return f"[{moment.strftime('%Y-%m-%d %H:%M:%S')}]"


def format_incoming(line: str, now: datetime | None = None) -> str:
    """Turn a line from the server into the text shown to the user.

    Lines that are not base64 are shown as they are; base64 lines are
    decrypted, and a :class:`DecryptionError` is raised if that fails.
    """
    try:
        raw = base64.b64decode(line, validate=True)
    except (binascii.Error, ValueError):
        plain = line
    else:
        plain = decrypt_message(raw)
    return enrich_with_emojis(f"{timestamp(now)} {plain}")


def log_to_file(username: str, line: str) -> None:
    """Append *line* to ``<username>_chat_log.txt`` when CLIENT_CHAT_LOGGING is true."""
    if os.environ.get("CLIENT_CHAT_LOGGING", "").lower() != "true":
        return
    try:
        with open(f"{username}_chat_log.txt", "a", encoding="utf-8") as log_file:
            log_file.write(f"{line}\n")
    except OSError:
        pass


def _debug_encrypted() -> bool:
    return os.environ.get("DEBUG_ENCRYPTED") == "true"


def _show_prompt(prompt: str) -> None:
    print(prompt, end="", flush=True)


async def _read_input() -> str | None:
    """Read one line from the user without blocking the event loop; None at end of input."""
    try:
        return await asyncio.to_thread(input)
    except EOFError:
        return None


async def _send(writer: asyncio.StreamWriter, text: str) -> None:
    writer.write(f"{text}\n".encode("utf-8"))
    await writer.drain()


async def _receive(reader: asyncio.StreamReader, username: str) -> None:
    """Print every line the server sends until the connection ends."""
    while True:
        raw = await reader.readline()
        if not raw:
            return
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError:
            return
        line = line.removesuffix("\n").removesuffix("\r")

        if _debug_encrypted():
            print(f"[client] encrypted base64 from server {line}")

        try:
            shown = format_incoming(line)
        except DecryptionError as err:
            print(f"❌ {err}", file=sys.stderr)
            return

        log_to_file(username, shown)

        if "-> all" in shown:
            print(f"{_BLUE}{shown}{_RESET}")
        elif "-> you" in shown:
            print(f"{_GREEN}{shown}{_RESET}")
        else:
            print(shown)
        _show_prompt(_PROMPT)


async def _login(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> str | None:
    """Answer the server's login prompts; returns the username, or None if it ended."""
    username = ""
    while True:
        raw = await reader.readline()
        if not raw:
            print("Connection closed by server.")
            return None
        response = raw.decode("utf-8", errors="replace")
        print(response, end="", flush=True)

        if "Connected to chat" in response or "[auth] Error" in response:
            return username

        user_input = await _read_input()
        if user_input is None:
            return None
        if not username:
            username = user_input.strip()
        await _send(writer, user_input)


async def _ask_again() -> bool:
    while True:
        _show_prompt("🔄 Do you want to login again? (y/n): ")
        answer = await _read_input()
        if answer is None:
            return False
        choice = answer.strip().lower()
        if choice in ("y", "yes"):
            return True
        if choice in ("n", "no"):
            return False
        print("❌ Please enter 'y' or 'n'.")


async def run_client_once(host: str = "127.0.0.1", port: int = 8080) -> bool:
    """Run one chat session; returns True if the user wants to log in again."""
    try:
        reader, writer = await asyncio.open_connection(host, port)
    except OSError as err:
        print(f"❌ Failed to connect: {err}", file=sys.stderr)
        return False

    print(f"[client] Connected to {host}:{port}")

    try:
        username = await _login(reader, writer)
        if username is None:
            return False

        receiver = asyncio.create_task(_receive(reader, username))

        while True:
            _show_prompt(_PROMPT)
            text = await _read_input()
            trimmed = "quit" if text is None else text.strip()

            if trimmed.lower() == "quit":
                try:
                    await _send(writer, encode_line("quit"))
                except ConnectionError:
                    pass
                break

            encoded = encode_line(trimmed)
            if _debug_encrypted():
                print(f"[client] encrypted base64 to server {encoded}")
            try:
                await _send(writer, encoded)
            except ConnectionError:
                print("❌ Failed to send message.")
                break

        await receiver
    finally:
        writer.close()

    return await _ask_again()


async def run_client(host: str = "127.0.0.1", port: int = 8080) -> None:
    """Run chat sessions until the user declines to log in again."""
    while await run_client_once(host, port):
        print("🔁 Reconnecting to chat...\n")
    print("👋 Exiting chat. Goodbye!")