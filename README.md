# cipherchat

A small chat system for the terminal: one server, many clients, on
`127.0.0.1:8080`. Users sign up or log in, then send private messages or
broadcasts to everyone else who is online.

## Running

Start the server:

    cipherchat server

In another terminal, start a client:

    cipherchat client

Run with no argument, `cipherchat` prints a usage line. Ctrl+C stops the
server or the client.

## Logging in

The server asks three questions in plain text, and the client passes your
answers on:

    Username:
    Are you a new user? (y/n):
    Password:

Answer `y` (either case) to create a new account. Any other answer logs in to
an existing one. On success the server welcomes you and you get a `=> `
prompt.

If sign-up or login fails, the client shows the server's error, for example
`[auth] Error: User already exists` or `[auth] Error: Invalid password`. The
client then goes on to the `=> ` prompt, but the server has started the
login questions again. The session does not recover from this. Stop the
client with Ctrl+C and start it again.

## Chat commands

Type these at the `=> ` prompt:

    msg <user> <message>   send a private message to one user
    broadcast <message>    send a message to every other online user
    list                   show the other online users
    help                   show the list of commands
    quit                   leave the chat

Typing `quit` in any case, or ending input, leaves the chat. The client then
asks whether you want to log in again. `y`/`yes` reconnects and `n`/`no`
exits. Any other answer repeats the question.

Each incoming line is shown with a local timestamp `[YYYY-mm-dd HH:MM:SS]`.
Broadcasts (`-> all`) are shown in blue and private messages (`-> you`) in
green. These emoticons are turned into emoji: `:)`, `:(`, `:D`, `<3`, `:o`
and `:thumbsup:`.

## Encryption

Once you are logged in, every line is encrypted with AES-256-GCM and sent
base64-encoded, one message per line. The key and nonce are fixed and shared
by the server and every client. The encryption therefore only hides messages
from casual viewing. It is not a secure channel. Usernames and passwords
cross the connection in plain text during login.

`cipherchat.crypto` holds the helpers:

- `encrypt_message(text)` returns the ciphertext.
- `decrypt_message(data)` returns the plaintext and raises `DecryptionError`
  on failure.
- `encode_line(text)` returns the encrypted text as base64.
- `decode_line(line)` returns the plaintext, or `None` if the line is not
  valid.

## Using it from Python

`cipherchat.server.ChatServer(authenticator=None, log_path="server_log.txt")`
runs the server:

- `await server.serve(host, port)` listens on any address.
- `handle_command`, `send_to_user`, `broadcast` and `online_users` drive it
  directly.

`cipherchat.server.Authenticator` keeps the accounts. It stores salted scrypt
password hashes. `signup` and `login` raise `AuthError` when they fail.

`cipherchat.client.run_client(host, port)` and
`run_client_once(host, port)` run the interactive client against another
address.

## Environment variables

| Variable              | Effect                                                                          |
|-----------------------|---------------------------------------------------------------------------------|
| `DEBUG_ENCRYPTED`     | `true` prints the base64 ciphertext of lines sent and received                  |
| `SERVER_LOGGING`      | `true` makes the server print each command and append it to `server_log.txt`    |
| `CLIENT_CHAT_LOGGING` | `true` (any case) makes the client append incoming lines to `<username>_chat_log.txt` |

## What it does not do

- Accounts are kept in memory only. They are lost when the server stops.
- The `cipherchat` command always uses `127.0.0.1:8080`. It has no options to
  choose another address or port.
- There is no chat history and no offline delivery. A private message to a
  user who is not online is refused.