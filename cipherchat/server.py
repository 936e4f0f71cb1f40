"""Chat server: plaintext login, then encrypted commands between users."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import os
import secrets
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from cipherchat.crypto import decode_line, encode_line

HELP_TEXT = """
                Available Commands:
                msg <user> <message>      - Send a private message to a specific user
                broadcast <message>       - Send a message to all online users
                list                      - View all online users
                help                      - Show this help message
                quit                      - Disconnect from the chat
                """


class AuthError(Exception):
    """Raised when signing up or logging in fails."""


class Authenticator:
    """In-memory user store with salted scrypt password hashes."""

    def __init__(self) -> None:
        self._users: dict[str, tuple[bytes, bytes]] = {}

    @staticmethod
    def _hash(password: str, salt: bytes) -> bytes:
        return hashlib.scrypt(password.encode("utf-8"), salt=salt, n=2**14, r=8, p=1)

    def signup(self, username: str, password: str) -> None:
        """Register a new user; raises AuthError if the name is taken."""
        if username in self._users:
            raise AuthError("User already exists")
        salt = secrets.token_bytes(16)
        self._users[username] = (salt, self._hash(password, salt))

    def login(self, username: str, password: str) -> None:
        """Check credentials; raises AuthError if they do not match."""
        try:
            salt, digest = self._users[username]
        except KeyError:
            raise AuthError("User not found") from None
        if not hmac.compare_digest(digest, self._hash(password, salt)):
            raise AuthError("Invalid password")


def _env_is_true(name: str) -> bool:
    return os.environ.get(name) == "true"


@dataclass
class _Client:
    writer: asyncio.StreamWriter
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class ChatServer:
    """Accepts chat clients, authenticates them and routes their commands."""

    def __init__(
        self,
        authenticator: Authenticator | None = None,
        log_path: str | os.PathLike = "server_log.txt",
    ) -> None:
        self.authenticator = authenticator if authenticator is not None else Authenticator()
        self.log_path = Path(log_path)
        self._clients: dict[str, _Client] = {}

    def online_users(self) -> list[str]:
        """Names of the users currently connected, in order of arrival."""
        return list(self._clients)

    def _log(self, msg: str) -> None:
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        print(f"[{stamp}] {msg}")
        try:
            with self.log_path.open("a", encoding="utf-8") as log_file:
                log_file.write(f"{msg}\n")
        except OSError:
            pass

    @staticmethod
    async def _write(writer: asyncio.StreamWriter, data: bytes) -> None:
        writer.write(data)
        await writer.drain()

    @staticmethod
    async def _read_text(reader: asyncio.StreamReader) -> str | None:
        line = await reader.readline()
        if not line:
            return None
        try:
            return line.decode("utf-8").strip()
        except UnicodeDecodeError:
            return None

    async def _authenticate(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> str | None:
        while True:
            await self._write(writer, b"Username: \n")
            username = await self._read_text(reader)
            if username is None:
                return None

            await self._write(writer, b"Are you a new user? (y/n): \n")
            answer = await self._read_text(reader)
            if answer is None:
                return None
            is_new = answer.lower() == "y"

            try:
                await self._write(writer, b"Password: \n")
            except ConnectionError:
                print(
                    f"[server] Write failed during password prompt for {username}",
                    file=sys.stderr,
                )
                self._clients.pop(username, None)
                return None
            password = await self._read_text(reader)
            if password is None:
                return None

            try:
                if is_new:
                    self.authenticator.signup(username, password)
                else:
                    self.authenticator.login(username, password)
            except AuthError as err:
                await self._write(writer, f"[auth] Error: {err}\n".encode("utf-8"))
                continue

            welcome = (
                f"✅ Welcome, {username}! Connected to chat. "
                "Type `help` to see available commands.\n"
            )
            await self._write(writer, welcome.encode("utf-8"))
            return username

    async def handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Serve one connection from login until it quits or disconnects."""
        username: str | None = None
        try:
            username = await self._authenticate(reader, writer)
            if username is None:
                return
            self._clients[username] = _Client(writer)
            print(f"[server] {username} connected")

            while True:
                raw = await reader.readline()
                if not raw:
                    break
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError:
                    break
                line = line.removesuffix("\n").removesuffix("\r")

                decrypted = decode_line(line)
                text = (decrypted if decrypted is not None else line).strip()

                if _env_is_true("DEBUG_ENCRYPTED"):
                    print(f"[server][encrypted base64 from {username}]: {line}")
                if _env_is_true("SERVER_LOGGING"):
                    self._log(f"[{username}] {text}")

                if not await self.handle_command(username, text):
                    break
        except (ConnectionError, ValueError):
            pass
        finally:
            if username is not None:
                self._clients.pop(username, None)
                print(f"[server] {username} disconnected")
            writer.close()

    async def handle_command(self, username: str, text: str) -> bool:
        """Carry out one chat command; returns False once the user quits."""
        command = text.strip()
        if command.startswith("msg "):
            parts = command[4:].split(" ", 1)
            if len(parts) != 2:
                await self.send_to_user(username, "Usage: msg <user> <message>")
                return True
            to_user, message = parts
            if await self.send_to_user(to_user, f"[{username} -> you]: {message}"):
                await self.send_to_user(username, f"✅ Message sent to {to_user}")
            else:
                await self.send_to_user(username, "❌ User not found or offline.")
        elif command.startswith("broadcast "):
            await self.broadcast(username, f"[{username} -> all]: {command[10:]}")
            await self.send_to_user(username, "✅ Broadcast message sent to all users")
        elif command == "list":
            others = ", ".join(user for user in self._clients if user != username)
            await self.send_to_user(username, f"Online users: {others}")
        elif command == "help":
            await self.send_to_user(username, HELP_TEXT)
        elif command == "quit":
            await self.send_to_user(username, "Goodbye!")
            return False
        else:
            await self.send_to_user(username, "Unknown command. Use help.")
        return True

    async def _deliver(self, client: _Client, line: str) -> None:
        async with client.lock:
            try:
                client.writer.write(f"{line}\n".encode("ascii"))
                await client.writer.drain()
            except ConnectionError:
                pass

    async def send_to_user(self, username: str, text: str) -> bool:
        """Encrypt *text* and send it to *username*; False if that user is not online."""
        encoded = encode_line(text)
        if _env_is_true("DEBUG_ENCRYPTED"):
            print(f"[server][sending encrypted base64 to {username}]: {encoded}")
        client = self._clients.get(username)
        if client is None:
            return False
        await self._deliver(client, encoded)
        return True

    async def broadcast(self, from_user: str, text: str) -> None:
        """Encrypt *text* and send it to every online user except *from_user*."""
        encoded = encode_line(text)
        if _env_is_true("DEBUG_ENCRYPTED"):
            print(f"[server][broadcasting encrypted base64 from {from_user}]: {encoded}")
        for user, client in list(self._clients.items()):
            if user != from_user:
                await self._deliver(client, encoded)

    async def serve(self, host: str = "127.0.0.1", port: int = 8080) -> None:
        """Listen on *host*:*port* and serve clients until cancelled."""
        server = await asyncio.start_server(self.handle_client, host, port)
        print(f"[server] Listening on {host}:{port}")
        async with server:
            await server.serve_forever()